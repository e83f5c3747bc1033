import pytest

from ugraph import data
from ugraph.types import RefValue


class RepoBuilder:
    """Writes objects and refs straight into a throwaway .ugit store."""

    def blob(self, content: bytes = b'hello\n'):
        return data.hash_object(content, 'blob')

    def tree(self, *entries):
        """entries are (mode, oid, name) triples"""
        lines = ''.join(f'{mode} {oid} {name}\n' for mode, oid, name in entries)
        return data.hash_object(lines.encode(), 'tree')

    def commit(self, tree, parents=(), message='msg'):
        commit_ = f'tree {tree}\n'
        for parent in parents:
            commit_ += f'parent {parent}\n'
        commit_ += f'\n{message}\n'
        return data.hash_object(commit_.encode(), 'commit')

    def tag(self, target, type_='commit', name='v1.0', message='release'):
        tag_ = f'object {target}\ntype {type_}\ntag {name}\n\n{message}\n'
        return data.hash_object(tag_.encode(), 'tag')

    def ref(self, name, oid):
        data.update_ref(name, RefValue(symbolic=False, value=oid))

    def symref(self, name, target):
        data.update_ref(name, RefValue(symbolic=True, value=target))


@pytest.fixture
def repo(tmp_path):
    with data.change_git_dir(work_tree=str(tmp_path)):
        data.init()
        yield RepoBuilder()
