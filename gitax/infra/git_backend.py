"""
Repository backend for gitax.

Provides a scoped handle over a dulwich repository. All object, tree, index
and checkout work goes through this module, making it:
- The only place that talks to dulwich
- Easy to swap for a fake in tests
- Free of any result-building logic

Note: dulwich is a pure Python git implementation; the git binary is not
required.
"""

import errno
import logging
import os
import re
import stat
from typing import Dict, Iterator, List, Optional, Tuple

import dulwich
from dulwich import porcelain
from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.ignore import IgnoreFilterManager
from dulwich.index import blob_from_path_and_stat, cleanup_mode, index_entry_from_stat
from dulwich.object_store import iter_tree_contents, tree_lookup_path
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from ..domain.status import StatusFlag
from ..domain.tree import MODE_GITLINK
from ..exit_codes import CheckoutConflictError, ObjectNotFoundError, RepositoryError, RepositoryIOError

logger = logging.getLogger(__name__)

_HEX_ID = re.compile(r'^[0-9a-fA-F]{4,40}$')
_FULL_HEX_LENGTH = 40

# (mode, object id) of a path in a tree, the index or the working tree
PathState = Optional[Tuple[int, bytes]]


def backend_version() -> str:
    """Version string of the dulwich library."""
    return '.'.join(str(part) for part in dulwich.__version__)


def init_repository(repo_path: str) -> str:
    """
    Create a repository at repo_path (creating the directory if needed).

    An existing repository is left untouched.

    Returns:
        The repository root
    """
    if os.path.isdir(os.path.join(repo_path, '.git')):
        logger.info(f"Repository already initialised at {repo_path}")
        return repo_path
    try:
        repo = porcelain.init(repo_path)
    except OSError as e:
        raise RepositoryError(f"Cannot initialise repository at {repo_path}: {e}") from e
    repo.close()
    logger.info(f"Initialised empty repository at {repo_path}")
    return repo_path


def _fs_type(mode: int) -> int:
    return stat.S_IFMT(mode)


class RepositoryHandle:
    """
    Short-lived session bound to one on-disk repository.

    Opened at the start of an operation and closed at its end, on every exit
    path. Objects read through a handle must not be kept after it closes.

    Example:
        with RepositoryHandle("/path/to/repo") as handle:
            for commit in handle.walk_commits():
                print(commit.id)
    """

    def __init__(self, repo_path: str):
        self.root = os.path.normpath(os.path.abspath(repo_path))
        try:
            self._repo = Repo(self.root)
        except NotGitRepository as e:
            raise RepositoryIOError(errno.ENOENT, "Not a git repository", self.root) from e
        self._head_tree: Optional[bytes] = None
        self._head_resolved = False
        self._ignore: Optional[IgnoreFilterManager] = None

    def __enter__(self) -> 'RepositoryHandle':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._repo.close()

    # =========================================================================
    # OBJECTS
    # =========================================================================

    def lookup(self, object_id: bytes):
        """Raw object lookup by full hex id. Raises KeyError if missing."""
        return self._repo[object_id]

    def head_id(self) -> Optional[bytes]:
        """Id of the commit HEAD points to, or None for an empty repository."""
        try:
            return self._repo.head()
        except KeyError:
            return None

    def head_tree_id(self) -> Optional[bytes]:
        if not self._head_resolved:
            head = self.head_id()
            self._head_tree = self._repo[head].tree if head is not None else None
            self._head_resolved = True
        return self._head_tree

    def walk_commits(self) -> Iterator[Commit]:
        """Commits reachable from HEAD, newest first."""
        head = self.head_id()
        if head is None:
            return
        for entry in self._repo.get_walker(include=[head]):
            yield entry.commit

    def resolve_object_id(self, object_id: str) -> bytes:
        """
        Resolve a full or abbreviated hex id to a full object id.

        Raises:
            ObjectNotFoundError: If the id is malformed, unknown or ambiguous
        """
        if not object_id or not _HEX_ID.match(object_id):
            raise ObjectNotFoundError(object_id)
        wanted = object_id.lower().encode('ascii')
        if len(wanted) == _FULL_HEX_LENGTH:
            if wanted not in self._repo.object_store:
                raise ObjectNotFoundError(object_id)
            return wanted

        # An object can be both loose and packed
        matches = sorted(set(self._repo.object_store.iter_prefix(wanted)))
        if not matches:
            raise ObjectNotFoundError(object_id)
        if len(matches) > 1:
            raise ObjectNotFoundError(object_id, f"Ambiguous object id: {object_id}")
        return matches[0]

    def tree_entry(self, tree_id: bytes, path: str) -> PathState:
        """(mode, id) of path inside a tree, or None if it is not there."""
        try:
            mode, sha = tree_lookup_path(self._repo.__getitem__, tree_id, path.encode('utf-8'))
        except (KeyError, NotTreeError):
            return None
        return mode, sha

    def commit_entry(self, commit: Commit, path: str) -> PathState:
        return self.tree_entry(commit.tree, path)

    def read_blob(self, blob_id: bytes) -> bytes:
        """Raw content of a blob."""
        obj = self._repo[blob_id]
        if not isinstance(obj, Blob):
            raise ObjectNotFoundError(blob_id.decode('ascii'), f"Not a file content id: {blob_id.decode('ascii')}")
        return obj.data

    # =========================================================================
    # INDEX AND WORKING TREE
    # =========================================================================

    def working_path(self, path: str) -> str:
        return os.path.join(self.root, *path.split('/'))

    def index_entry(self, path: str, index=None) -> PathState:
        """(mode, id) of a staged path, or None when the index has no entry."""
        if index is None:
            index = self._repo.open_index()
        key = path.encode('utf-8')
        if key not in index:
            return None
        entry = index[key]
        sha = getattr(entry, 'sha', None)
        if sha is None:
            # Conflicted entries carry their stages instead of one blob
            stage = getattr(entry, 'this', None) or getattr(entry, 'ancestor', None)
            if stage is None:
                return None
            return stage.mode, stage.sha
        return entry.mode, sha

    def index_paths(self, index=None) -> List[str]:
        if index is None:
            index = self._repo.open_index()
        return [path.decode('utf-8') for path in index]

    def working_entry(self, path: str) -> PathState:
        """(mode, id) of the working file at path, or None if absent."""
        full_path = self.working_path(path)
        try:
            st = os.lstat(full_path)
        except FileNotFoundError:
            return None
        if stat.S_ISDIR(st.st_mode):
            return None
        if not (stat.S_ISREG(st.st_mode) or stat.S_ISLNK(st.st_mode)):
            return None
        blob = blob_from_path_and_stat(os.fsencode(full_path), st)
        return cleanup_mode(st.st_mode), blob.id

    def is_ignored(self, path: str) -> bool:
        if self._ignore is None:
            self._ignore = IgnoreFilterManager.from_repo(self._repo)
        return bool(self._ignore.is_ignored(path))

    def status_flags(self, path: str, index=None) -> StatusFlag:
        """
        Status bits of one path: HEAD tree vs index vs working file.

        Rename bits are never set; detecting a rename needs the other half of
        the pair, which a single-path query does not have. Submodule links
        are always CURRENT: their content belongs to another repository.
        """
        if index is None:
            index = self._repo.open_index()
        head_tree = self.head_tree_id()
        head = self.tree_entry(head_tree, path) if head_tree is not None else None
        staged = self.index_entry(path, index)

        if any(state is not None and _fs_type(state[0]) == MODE_GITLINK for state in (head, staged)):
            return StatusFlag.CURRENT

        working = self.working_entry(path)
        if head is None and staged is None and working is None:
            return StatusFlag.NONEXISTENT

        flags = StatusFlag.CURRENT
        if staged is not None:
            if head is None:
                flags |= StatusFlag.INDEX_NEW
            elif _fs_type(head[0]) != _fs_type(staged[0]):
                flags |= StatusFlag.INDEX_TYPECHANGE
            elif head != staged:
                flags |= StatusFlag.INDEX_MODIFIED

            if working is None:
                flags |= StatusFlag.WT_DELETED
            elif _fs_type(working[0]) != _fs_type(staged[0]):
                flags |= StatusFlag.WT_TYPECHANGE
            elif working != staged:
                flags |= StatusFlag.WT_MODIFIED
        else:
            if head is not None:
                flags |= StatusFlag.INDEX_DELETED
            if working is not None:
                flags |= StatusFlag.IGNORED if self.is_ignored(path) else StatusFlag.WT_NEW

        return flags

    def _untracked_paths(self, index) -> Iterator[str]:
        # dulwich skips .git and nested repositories; ignored files are kept
        # so that status_flags can report them as IGNORED
        for path in porcelain.get_untracked_paths(
            self.root, self.root, index, exclude_ignored=False, untracked_files="all",
        ):
            yield path.replace(os.sep, '/')

    def iter_status(self) -> Iterator[Tuple[str, StatusFlag]]:
        """
        Status of every path known to HEAD, the index or the working tree.

        Submodule links and anything below them are left out.
        """
        index = self._repo.open_index()
        paths = set()
        submodules = set()

        for path in self.index_paths(index):
            staged = self.index_entry(path, index)
            if staged is not None and _fs_type(staged[0]) == MODE_GITLINK:
                submodules.add(path)
            else:
                paths.add(path)

        head_tree = self.head_tree_id()
        if head_tree is not None:
            for entry in iter_tree_contents(self._repo.object_store, head_tree):
                path = entry.path.decode('utf-8')
                if _fs_type(entry.mode) == MODE_GITLINK:
                    submodules.add(path)
                else:
                    paths.add(path)

        paths.update(self._untracked_paths(index))

        for path in sorted(paths):
            if path in submodules or any(path.startswith(sub + '/') for sub in submodules):
                continue
            yield path, self.status_flags(path, index)

    def is_dirty(self) -> bool:
        """True if any path differs from HEAD (ignored files do not count)."""
        return any(
            flags not in (StatusFlag.CURRENT, StatusFlag.IGNORED)
            for _path, flags in self.iter_status()
        )

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def _checkout_targets(self, commit: Commit, paths: List[str]) -> Dict[str, Tuple[int, bytes]]:
        targets: Dict[str, Tuple[int, bytes]] = {}
        for path in paths:
            path = path.strip('/')
            if path in ('', '.'):
                tree_id, prefix = commit.tree, ''
            else:
                found = self.tree_entry(commit.tree, path)
                if found is None:
                    logger.debug(f"Path {path} not in commit {commit.id.decode('ascii')[:7]}, skipped")
                    continue
                mode, sha = found
                if not stat.S_ISDIR(mode):
                    if _fs_type(mode) != MODE_GITLINK:
                        targets[path] = (mode, sha)
                    continue
                tree_id, prefix = sha, path + '/'

            for entry in iter_tree_contents(self._repo.object_store, tree_id):
                if _fs_type(entry.mode) == MODE_GITLINK:
                    continue
                targets[prefix + entry.path.decode('utf-8')] = (entry.mode, entry.sha)
        return targets

    def _would_lose_changes(self, path: str, target: Tuple[int, bytes], index) -> bool:
        working = self.working_entry(path)
        staged = self.index_entry(path, index)
        if working is not None and working != target and working != staged:
            return True
        head_tree = self.head_tree_id()
        head = self.tree_entry(head_tree, path) if head_tree is not None else None
        return staged is not None and staged != target and staged != head

    def _write_working_file(self, path: str, mode: int, data: bytes) -> os.stat_result:
        full_path = self.working_path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        if os.path.islink(full_path) or (stat.S_ISLNK(mode) and os.path.lexists(full_path)):
            os.unlink(full_path)
        if stat.S_ISLNK(mode):
            os.symlink(os.fsdecode(data), full_path)
        else:
            with open(full_path, 'wb') as f:
                f.write(data)
            os.chmod(full_path, 0o755 if mode & 0o111 else 0o644)
        return os.lstat(full_path)

    def checkout_paths(self, commit_id: bytes, paths: List[str], force: bool = False) -> List[str]:
        """
        Check out paths (files or folders) from a commit into the working tree.

        Working files and their index entries are overwritten. Without force,
        the checkout is refused when it would discard local changes.

        Returns:
            Repo-relative paths written

        Raises:
            CheckoutConflictError: Local changes block a non-forced checkout
        """
        commit = self._repo[commit_id]
        if not isinstance(commit, Commit):
            raise ObjectNotFoundError(commit_id.decode('ascii'), f"Not a commit: {commit_id.decode('ascii')}")

        targets = self._checkout_targets(commit, paths)
        index = self._repo.open_index()

        if not force:
            conflicts = [path for path, target in sorted(targets.items())
                         if self._would_lose_changes(path, target, index)]
            if conflicts:
                raise CheckoutConflictError(conflicts)

        written = []
        for path, (mode, sha) in sorted(targets.items()):
            data = self._repo[sha].data
            st = self._write_working_file(path, mode, data)
            index[path.encode('utf-8')] = index_entry_from_stat(st, sha, mode=mode)
            written.append(path)
        index.write()

        logger.debug(f"Checked out {len(written)} file(s) from {commit_id.decode('ascii')[:7]}")
        return written
