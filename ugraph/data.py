import os
import hashlib
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from ugraph import types
from ugraph.errors import DecodeError, ObjectNotFound, RepositoryNotFound
from ugraph.types import RefValue

logger = logging.getLogger(__name__)

GIT_DIR: str | None = None


@contextmanager
def change_git_dir(work_tree=None, git_dir=None):
    global GIT_DIR
    old_dir = GIT_DIR
    GIT_DIR = git_dir if git_dir is not None else f'{work_tree}/.ugit'
    try:
        yield
    finally:
        GIT_DIR = old_dir


def init():
    assert GIT_DIR is not None
    os.makedirs(f'{GIT_DIR}/objects', exist_ok=True)


def check_repository():
    if GIT_DIR is None or not os.path.isdir(f'{GIT_DIR}/objects'):
        raise RepositoryNotFound(f'not a ugit repository: {GIT_DIR}')


def hash_object(data: bytes, type_: types.ObjectType = 'blob') -> types.OID:
    obj = type_.encode() + b'\x00' + data
    oid = hashlib.sha1(obj).hexdigest()
    with open(f'{GIT_DIR}/objects/{oid}', 'wb') as out:
        out.write(obj)
    return oid


def _read_object(oid: types.OID) -> tuple[types.ObjectType, bytes]:
    try:
        with open(f'{GIT_DIR}/objects/{oid}', 'rb') as f:
            obj = f.read()
    except (OSError, ValueError):
        # missing, a directory, or a name that is no file name at all
        raise ObjectNotFound(f'object {oid} not found') from None

    type_, sep, content = obj.partition(b'\x00')
    type_ = type_.decode(errors='replace')
    if not sep or type_ not in types.OBJECT_TYPES:
        raise DecodeError(f'object {oid} has a malformed header')
    return type_, content


def get_object(oid: types.OID, expected: types.ObjectType | None = 'blob') -> bytes:
    type_, content = _read_object(oid)
    if expected is not None and type_ != expected:
        raise DecodeError(f'object {oid}: expected {expected}, got {type_}')
    return content


def get_object_type(oid: types.OID) -> types.ObjectType:
    return _read_object(oid)[0]


def object_exists(oid: types.OID) -> bool:
    return os.path.isfile(f'{GIT_DIR}/objects/{oid}')


def iter_objects() -> Iterator[types.OID]:
    objects_dir = f'{GIT_DIR}/objects'
    yield from sorted(name for name in os.listdir(objects_dir)
                      if os.path.isfile(f'{objects_dir}/{name}'))


def update_ref(ref: types.RefName, value: RefValue):
    assert value.value
    if value.symbolic:
        value = f'ref: {value.value}'
    else:
        value = value.value
    ref_path = f'{GIT_DIR}/{ref}'
    os.makedirs(os.path.dirname(ref_path), exist_ok=True)
    with open(ref_path, 'w') as f:
        f.write(value)


def get_ref(ref: types.RefName) -> RefValue:
    """Read a single reference without following symbolic links."""
    ref_path = f'{GIT_DIR}/{ref}'
    value = None
    if os.path.isfile(ref_path):
        try:
            with open(ref_path, encoding='utf-8') as f:
                value = f.read().strip() or None
        except UnicodeDecodeError:
            raise DecodeError(f'reference {ref} is not valid utf-8') from None

    symbolic = bool(value) and value.startswith('ref:')
    if symbolic:
        value = value.split(':', 1)[1].strip()
    return RefValue(symbolic=symbolic, value=value)


def iter_refs() -> Iterable[tuple[types.RefName, RefValue]]:
    refs = ['HEAD', 'MERGE_HEAD']
    for root, dirnames, filenames in os.walk(f'{GIT_DIR}/refs/'):
        dirnames.sort()
        root = os.path.relpath(root, GIT_DIR).replace('\\', '/')
        refs.extend(f'{root}/{name}' for name in sorted(filenames))

    for refname in refs:
        ref = get_ref(refname)
        if ref.value:
            yield refname, ref
        else:
            logger.debug('skipping empty or missing ref %s', refname)
