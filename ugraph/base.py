import itertools
import operator
import string

from . import data
from . import types
from .errors import DecodeError


def _decode_text(oid: types.OID, expected: types.ObjectType) -> str:
    try:
        return data.get_object(oid, expected).decode()
    except UnicodeDecodeError:
        raise DecodeError(f'{expected} {oid} is not valid utf-8') from None


def _split_header(oid, line):
    key, sep, value = line.partition(' ')
    if not sep or not value:
        raise DecodeError(f'object {oid}: malformed header line {line!r}')
    return key, value


def get_blob(oid: types.OID) -> types.Blob:
    return types.Blob(data=data.get_object(oid, 'blob'))


def get_tree(oid: types.OID) -> types.Tree:
    entries = []
    for line in _decode_text(oid, 'tree').splitlines():
        try:
            mode, entry_oid, name = line.split(' ', 2)
        except ValueError:
            raise DecodeError(f'tree {oid}: malformed entry {line!r}') from None
        if mode not in types.ENTRY_MODES:
            raise DecodeError(f'tree {oid}: unknown entry mode {mode!r}')
        if not is_oid(entry_oid):
            raise DecodeError(f'tree {oid}: bad object id {entry_oid!r}')
        entries.append(types.TreeEntry(mode=mode, oid=entry_oid, name=name))
    return types.Tree(entries=entries)


def get_commit(oid: types.OID) -> types.Commit:
    parents = []
    tree = None
    lines = iter(_decode_text(oid, 'commit').splitlines())
    # headers end at the first empty line, the message follows
    for line in itertools.takewhile(operator.truth, lines):
        key, value = _split_header(oid, line)
        if key == 'tree':
            tree = value
        elif key == 'parent':
            parents.append(value)
        elif key in ('author', 'committer'):
            continue
        else:
            raise DecodeError(f'commit {oid}: unknown field {key}')

    if tree is None:
        raise DecodeError(f'commit {oid} has no tree')
    message = '\n'.join(lines)
    return types.Commit(tree=tree, parents=parents, message=message)


def get_tag(oid: types.OID) -> types.Tag:
    fields = {}
    lines = iter(_decode_text(oid, 'tag').splitlines())
    for line in itertools.takewhile(operator.truth, lines):
        key, value = _split_header(oid, line)
        if key not in ('object', 'type', 'tag', 'tagger'):
            raise DecodeError(f'tag {oid}: unknown field {key}')
        fields[key] = value

    for key in ('object', 'type', 'tag'):
        if key not in fields:
            raise DecodeError(f'tag {oid} has no {key}')
    if fields['type'] not in types.OBJECT_TYPES:
        raise DecodeError(f'tag {oid}: unknown target type {fields["type"]!r}')
    return types.Tag(object=fields['object'], type=fields['type'],
                     name=fields['tag'], message='\n'.join(lines))


_DECODERS = {
    'blob': get_blob,
    'tree': get_tree,
    'commit': get_commit,
    'tag': get_tag,
}


def get_object(oid: types.OID, expected: types.ObjectType | None = None) -> types.Object:
    """Decode the object stored under `oid`, dispatching on its stored type.

    When `expected` is given the stored type has to match it.
    """
    type_ = data.get_object_type(oid)
    if expected is not None and type_ != expected:
        raise DecodeError(f'object {oid}: expected {expected}, got {type_}')
    return _DECODERS[type_](oid)


def is_oid(name: str) -> bool:
    return len(name) == 40 and all(c in string.hexdigits for c in name)


def is_ref_name(name: str) -> bool:
    """Only HEAD, MERGE_HEAD and files under refs/ are references."""
    parts = name.split('/')
    if '' in parts or '.' in parts or '..' in parts:
        return False
    return name in ('HEAD', 'MERGE_HEAD') or (parts[0] == 'refs' and len(parts) > 1)


def find_ref(name: str) -> types.RefName | None:
    if name == '@':
        name = 'HEAD'

    refs_to_try = [
        f'{name}',
        f'refs/{name}',
        f'refs/tags/{name}',
        f'refs/heads/{name}'
    ]
    for ref in refs_to_try:
        if is_ref_name(ref) and data.get_ref(ref).value:
            return ref
    return None
