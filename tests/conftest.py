"""
Shared fixtures for gitax tests.

Two ways of building repositories:
- HistoryBuilder writes commit objects directly, so tests can shape any
  graph (root commits, merges, side branches) without touching the disk
  checkout.
- WorkTree goes through dulwich porcelain (add/commit), so the working
  tree and index are real.
"""

import os

import pytest
from dulwich import porcelain
from dulwich.index import index_entry_from_stat
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import Repo

AUTHOR = b"Test User <test@example.com>"
BASE_TIME = 1_700_000_000


class HistoryBuilder:
    """Build a commit graph object by object."""

    def __init__(self, path):
        self.path = str(path)
        os.makedirs(self.path, exist_ok=True)
        self.repo = Repo.init(self.path)
        self._time = BASE_TIME

    def close(self):
        self.repo.close()

    def _write_tree(self, node):
        tree = Tree()
        for name, value in node.items():
            if isinstance(value, dict):
                tree.add(name.encode(), 0o040000, self._write_tree(value))
                continue
            mode = 0o100644
            if isinstance(value, tuple):
                mode, value = value
            if mode == 0o160000:
                # Submodule links point at a commit id of another repository
                tree.add(name.encode(), mode, value.encode())
                continue
            data = value.encode() if isinstance(value, str) else value
            blob = Blob.from_string(data)
            self.repo.object_store.add_object(blob)
            tree.add(name.encode(), mode, blob.id)
        self.repo.object_store.add_object(tree)
        return tree.id

    def tree(self, files):
        """Write a full snapshot {path: content or (mode, content)}."""
        root = {}
        for path, content in files.items():
            parts = path.split('/')
            node = root
            for part in parts[:-1]:
                node = node.setdefault(part, {})
            node[parts[-1]] = content
        return self._write_tree(root)

    def commit(self, files, message, parents=None, update_head=True):
        """
        Commit a snapshot. parents defaults to the current HEAD (none for
        the first commit). Returns the commit id as str.
        """
        if parents is None:
            try:
                parents = [self.repo.head()]
            except KeyError:
                parents = []
        else:
            parents = [p.encode() if isinstance(p, str) else p for p in parents]

        commit = Commit()
        commit.tree = self.tree(files)
        commit.parents = parents
        commit.author = commit.committer = AUTHOR
        commit.author_time = commit.commit_time = self._time
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = message.encode()
        self._time += 60
        self.repo.object_store.add_object(commit)

        if update_head:
            self.repo.refs[b"HEAD"] = commit.id
        return commit.id.decode()


class WorkTree:
    """A repository driven through its working tree and index."""

    def __init__(self, path):
        self.path = str(path)
        os.makedirs(self.path, exist_ok=True)
        repo = porcelain.init(self.path)
        repo.close()

    def file(self, relative):
        return os.path.join(self.path, *relative.split('/'))

    def write(self, relative, content):
        full = self.file(relative)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        if isinstance(content, bytes):
            with open(full, 'wb') as f:
                f.write(content)
            return full
        with open(full, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        return full

    def read(self, relative):
        with open(self.file(relative), encoding='utf-8', newline='') as f:
            return f.read()

    def add(self, *relatives):
        porcelain.add(self.path, paths=[self.file(r) for r in relatives])

    def link_submodule(self, relative, commit_id):
        """Stage a submodule link at relative pointing at commit_id."""
        full = self.file(relative)
        os.makedirs(full, exist_ok=True)
        with Repo(self.path) as repo:
            index = repo.open_index()
            index[relative.encode()] = index_entry_from_stat(
                os.stat(full), commit_id.encode(), mode=0o160000,
            )
            index.write()

    def commit(self, message):
        commit_id = porcelain.commit(
            self.path, message=message.encode(), author=AUTHOR, committer=AUTHOR,
        )
        return commit_id.decode()

    def commit_files(self, files, message):
        for relative, content in files.items():
            self.write(relative, content)
        self.add(*files)
        return self.commit(message)

    def blob_id(self, relative, commit_id=None):
        """Id of the blob stored at relative in a commit (HEAD by default)."""
        from dulwich.object_store import tree_lookup_path
        with Repo(self.path) as repo:
            commit = repo[commit_id.encode()] if commit_id else repo[repo.head()]
            _mode, sha = tree_lookup_path(repo.__getitem__, commit.tree, relative.encode())
            return sha.decode()


@pytest.fixture
def history(tmp_path):
    builder = HistoryBuilder(tmp_path / "history-repo")
    yield builder
    builder.close()


@pytest.fixture
def worktree(tmp_path):
    return WorkTree(tmp_path / "work-repo")


@pytest.fixture
def config(tmp_path):
    """Configuration with artifacts written under tmp_path."""
    temp_dir = tmp_path / "artifacts"
    temp_dir.mkdir()
    return {
        "materialize": {"temp_dir": str(temp_dir)},
        "sync": {"patterns": ["*.xpo"], "source": "tree"},
        "logging": {"level": "INFO", "format": "%(levelname)s: %(message)s"},
    }
