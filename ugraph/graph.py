"""Discover the object graph of a ugit repository.

`walk` starts from reference names or object ids (or from every object and
reference in the store when given none) and collects each reachable object
once, sorted into one set per kind, along with every containment edge seen
on the way. Edges are kept as found: two trees holding the same blob give
two edges into a single blob node.
"""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from typing_extensions import assert_never

from . import base
from . import data
from . import types
from .errors import DecodeError, ReferenceResolutionError, UnresolvableRoot

logger = logging.getLogger(__name__)

Edge = tuple[types.OID | types.RefName, types.OID | types.RefName]


@dataclass
class WalkState:
    blobs: set[types.OID] = field(default_factory=set)
    trees: set[types.OID] = field(default_factory=set)
    commits: set[types.OID] = field(default_factory=set)
    tags: set[types.OID] = field(default_factory=set)
    refs: dict[types.RefName, types.RefValue] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)

    def objects(self, kind: types.ObjectType) -> set[types.OID]:
        if kind == 'blob':
            return self.blobs
        elif kind == 'tree':
            return self.trees
        elif kind == 'commit':
            return self.commits
        elif kind == 'tag':
            return self.tags
        else:
            assert_never(kind)

    def kind_of(self, oid: types.OID) -> types.ObjectType | None:
        for kind in types.OBJECT_TYPES:
            if oid in self.objects(kind):
                return kind
        return None


class _Walker:

    def __init__(self, state: WalkState):
        self.state = state

    def _mark(self, oid: types.OID, kind: types.ObjectType) -> bool:
        """Put `oid` into its kind-set. False if it was already there."""
        seen_as = self.state.kind_of(oid)
        if seen_as is None:
            self.state.objects(kind).add(oid)
            return True
        if seen_as != kind:
            raise DecodeError(f'object {oid} reached as {kind} but already seen as {seen_as}')
        return False

    def walk_object(self, oid: types.OID, kind: types.ObjectType | None = None):
        # (oid, kind to expect or None to ask the store, submodule link)
        stack: list[tuple[types.OID, types.ObjectType | None, bool]] = [(oid, kind, False)]

        while stack:
            oid, kind, submodule = stack.pop()

            if kind is None:
                if self.state.kind_of(oid) is not None:
                    continue
                kind = data.get_object_type(oid)
            elif kind == 'blob':
                # blobs have no children, no need to read them
                self._mark(oid, kind)
                continue
            elif submodule and not data.object_exists(oid):
                # commit of another repository
                self._mark(oid, kind)
                continue

            if not self._mark(oid, kind):
                continue
            logger.debug('expanding %s %s', kind, oid)

            obj = base.get_object(oid, expected=kind)
            children = self._expand(oid, obj)
            stack.extend(reversed(children))

    def _expand(self, oid: types.OID, obj: types.Object):
        """Record the outgoing edges of `obj`, return what to visit next."""
        edges = self.state.edges

        if isinstance(obj, types.Blob):
            return []
        elif isinstance(obj, types.Tag):
            edges.append((oid, obj.object))
            return [(obj.object, None, False)]
        elif isinstance(obj, types.Commit):
            edges.append((oid, obj.tree))
            edges.extend((oid, parent) for parent in obj.parents)
            return [(obj.tree, 'tree', False)] + [(parent, 'commit', False) for parent in obj.parents]
        elif isinstance(obj, types.Tree):
            children = []
            for entry in obj.entries:
                edges.append((oid, entry.oid))
                if entry.mode == 'tree':
                    children.append((entry.oid, 'tree', False))
                elif entry.mode == 'blob':
                    children.append((entry.oid, 'blob', False))
                elif entry.mode == 'commit':
                    children.append((entry.oid, 'commit', True))
                else:
                    assert_never(entry.mode)
            return children
        else:
            assert_never(obj)

    def walk_ref(self, name: types.RefName):
        chain = []
        while name not in self.state.refs:
            ref = data.get_ref(name)
            if not ref.value:
                via = f' (via {" -> ".join(chain)})' if chain else ''
                raise ReferenceResolutionError(f'reference {name} does not exist{via}')

            logger.debug('reference %s -> %s', name, ref.value)
            self.state.refs[name] = ref
            self.state.edges.append((name, ref.value))
            chain.append(name)

            if not ref.symbolic:
                if not base.is_oid(ref.value):
                    raise ReferenceResolutionError(f'reference {name} holds a bad object id {ref.value!r}')
                self.walk_object(ref.value)
                return
            if not base.is_ref_name(ref.value):
                raise ReferenceResolutionError(f'reference {name} points at bad name {ref.value!r}')
            name = ref.value

        if name in chain:
            raise ReferenceResolutionError(f'reference cycle: {" -> ".join(chain + [name])}')


def walk(roots: Iterable[str] = ()) -> WalkState:
    """Walk the repository at `data.GIT_DIR` from `roots`.

    Each root is a reference name (tried as given, then under refs/,
    refs/tags/ and refs/heads/) or a full object id. With no roots every
    object and every reference in the store is walked.

    Raises an `UgraphError` on the first store or resolution failure.
    """
    data.check_repository()
    state = WalkState()
    walker = _Walker(state)
    roots = list(roots)

    if not roots:
        logger.info('no roots given, walking the whole store')
        for oid in data.iter_objects():
            walker.walk_object(oid)
        for refname, _ in data.iter_refs():
            walker.walk_ref(refname)

    for root in roots:
        refname = base.find_ref(root)
        if refname is not None:
            walker.walk_ref(refname)
        elif base.is_oid(root) and data.object_exists(root):
            walker.walk_object(root)
        else:
            raise UnresolvableRoot(f'unknown name {root}')

    logger.info('walked %d commits, %d trees, %d blobs, %d tags, %d refs, %d edges',
                len(state.commits), len(state.trees), len(state.blobs),
                len(state.tags), len(state.refs), len(state.edges))
    return state
