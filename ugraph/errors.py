class UgraphError(Exception):
    """Base class for every failure that aborts a graph run."""


class RepositoryNotFound(UgraphError):
    pass


class ObjectNotFound(UgraphError):
    pass


class DecodeError(UgraphError):
    """An object payload (or its header) does not parse."""


class UnresolvableRoot(UgraphError):
    """A root argument is neither a reference nor a stored object."""


class ReferenceResolutionError(UgraphError):
    """A reference chain is broken or loops back on itself."""
