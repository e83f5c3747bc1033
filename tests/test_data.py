import hashlib

import pytest

from ugraph import data
from ugraph.errors import DecodeError, ObjectNotFound, RepositoryNotFound
from ugraph.types import RefValue


def test_hash_object_covers_type_header(repo):
    oid = data.hash_object(b'content', 'blob')
    assert oid == hashlib.sha1(b'blob\x00content').hexdigest()
    assert data.hash_object(b'content', 'tree') != oid


def test_get_object_roundtrip_and_type(repo):
    oid = data.hash_object(b'payload', 'blob')
    assert data.get_object(oid) == b'payload'
    assert data.get_object(oid, expected=None) == b'payload'
    assert data.get_object_type(oid) == 'blob'
    assert data.object_exists(oid)


def test_get_object_missing(repo):
    with pytest.raises(ObjectNotFound):
        data.get_object('0' * 40)
    assert not data.object_exists('0' * 40)


def test_get_object_wrong_type(repo):
    oid = data.hash_object(b'payload', 'blob')
    with pytest.raises(DecodeError, match='expected tree'):
        data.get_object(oid, expected='tree')


def test_get_object_malformed_header(repo):
    with open(f'{data.GIT_DIR}/objects/bad', 'wb') as f:
        f.write(b'no separator here')
    with open(f'{data.GIT_DIR}/objects/odd', 'wb') as f:
        f.write(b'gizmo\x00stuff')

    with pytest.raises(DecodeError):
        data.get_object_type('bad')
    with pytest.raises(DecodeError):
        data.get_object_type('odd')


def test_iter_objects_sorted(repo):
    oids = [data.hash_object(f'{i}'.encode()) for i in range(5)]
    assert list(data.iter_objects()) == sorted(oids)


def test_get_ref_does_not_follow_symbolic(repo):
    repo.ref('refs/heads/master', 'a' * 40)
    repo.symref('HEAD', 'refs/heads/master')

    assert data.get_ref('HEAD') == RefValue(symbolic=True, value='refs/heads/master')
    assert data.get_ref('refs/heads/master') == RefValue(symbolic=False, value='a' * 40)
    assert data.get_ref('refs/heads/nope') == RefValue(symbolic=False, value=None)


def test_iter_refs(repo):
    repo.ref('refs/heads/master', 'a' * 40)
    repo.ref('refs/tags/v1', 'b' * 40)
    repo.symref('HEAD', 'refs/heads/master')

    refs = dict(data.iter_refs())
    assert list(refs) == ['HEAD', 'refs/heads/master', 'refs/tags/v1']
    assert refs['HEAD'].symbolic


def test_check_repository(tmp_path):
    with data.change_git_dir(work_tree=str(tmp_path)):
        with pytest.raises(RepositoryNotFound):
            data.check_repository()
        data.init()
        data.check_repository()


def test_change_git_dir_restores(tmp_path):
    before = data.GIT_DIR
    with data.change_git_dir(git_dir=str(tmp_path)):
        assert data.GIT_DIR == str(tmp_path)
    assert data.GIT_DIR == before
    with data.change_git_dir(work_tree=str(tmp_path)):
        assert data.GIT_DIR == f'{tmp_path}/.ugit'


@pytest.mark.parametrize('suffix', ['/x', '\x00'])
def test_get_object_bad_name_is_not_found(repo, suffix):
    blob = data.hash_object(b'payload')
    with pytest.raises(ObjectNotFound):
        data.get_object(blob + suffix)


def test_get_ref_not_utf8(repo):
    with open(f'{data.GIT_DIR}/HEAD', 'wb') as f:
        f.write(b'\xff\xfe')
    with pytest.raises(DecodeError, match='not valid utf-8'):
        data.get_ref('HEAD')
    with pytest.raises(DecodeError):
        list(data.iter_refs())
