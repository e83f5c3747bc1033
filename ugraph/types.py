from typing import TypeAlias, NamedTuple, Literal

OID: TypeAlias = str  # hash
RefName: TypeAlias = str  # e.g. 'HEAD', 'refs/heads/master'
ObjectType: TypeAlias = Literal['blob', 'tree', 'commit', 'tag']
# tree entries are tagged with the kind of object they point at:
# 'tree' is a directory, 'blob' a regular file, 'commit' a submodule link
EntryMode: TypeAlias = Literal['tree', 'blob', 'commit']

OBJECT_TYPES: tuple[ObjectType, ...] = ('blob', 'tree', 'commit', 'tag')
ENTRY_MODES: tuple[EntryMode, ...] = ('tree', 'blob', 'commit')


class Blob(NamedTuple):
    data: bytes


class TreeEntry(NamedTuple):
    mode: EntryMode
    oid: OID
    name: str


class Tree(NamedTuple):
    entries: list[TreeEntry]


class Commit(NamedTuple):
    tree: OID
    parents: list[OID]
    message: str


class Tag(NamedTuple):
    object: OID
    type: ObjectType
    name: str
    message: str


Object: TypeAlias = Blob | Tree | Commit | Tag


class RefValue(NamedTuple):
    symbolic: bool
    value: OID | RefName | None
