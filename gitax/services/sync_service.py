"""
Folder synchronization and index listing for gitax.

Brings a working folder up to the tip of HEAD and reports the files of
interest, and lists every file that differs from the last commit.
"""

import fnmatch
import logging
import os
import shutil
import stat
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from ..config import get_temp_dir, load_config
from ..domain.history import ACTION_UPDATE, CommitRef, HistoryRecord
from ..domain.status import FileStatus, map_status
from ..domain.tree import MODE_GITLINK
from ..exit_codes import ConfigError, ObjectNotFoundError
from ..infra.git_backend import RepositoryHandle
from ..utils import normalize_path, repo_root_path, resolve_file_path
from .materialize_service import materialize_to_destination, temp_artifact_path
from .tree_walker import extension_filter, subtree, walk_tree

logger = logging.getLogger(__name__)

SOURCE_TREE = 'tree'
SOURCE_FILESYSTEM = 'filesystem'


def tree_files(handle: RepositoryHandle, commit, folder: str, patterns: Iterable[str]) -> Iterator[str]:
    """Repo-relative paths of matching files under folder in a commit's tree."""
    root_tree = handle.lookup(commit.tree)
    tree = subtree(handle.lookup, root_tree, folder)
    if tree is None:
        return
    prefix = folder.strip('/')
    prefix = prefix + '/' if prefix and prefix != '.' else ''
    for entry in walk_tree(handle.lookup, tree, extension_filter(patterns), prefix=prefix):
        yield entry.path


def filesystem_files(handle: RepositoryHandle, folder: str, patterns: Iterable[str]) -> Iterator[str]:
    """Repo-relative paths of matching files under folder on disk."""
    lowered = [p.lower() for p in patterns]
    top = handle.working_path(folder.strip('/')) if folder.strip('/') not in ('', '.') else handle.root
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames[:] = sorted(d for d in dirnames if d != '.git')
        for filename in sorted(filenames):
            if any(fnmatch.fnmatchcase(filename.lower(), p) for p in lowered):
                yield normalize_path(handle.root, os.path.join(dirpath, filename))


ENUMERATORS = {
    SOURCE_TREE: lambda handle, commit, folder, patterns: tree_files(handle, commit, folder, patterns),
    SOURCE_FILESYSTEM: lambda handle, commit, folder, patterns: filesystem_files(handle, folder, patterns),
}


class SyncService:
    """
    Service for folder sync and dirty-file listing.

    Example:
        service = SyncService()
        for record in service.folder_sync("/repo", "/repo/Classes", force=True):
            print(record.item_path, record.action)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        handle_factory: Callable[[str], RepositoryHandle] = RepositoryHandle,
    ):
        self.config = config or load_config()
        self.open_repository = handle_factory

    def _patterns(self, patterns: Optional[Iterable[str]]) -> List[str]:
        if patterns:
            return list(patterns)
        configured = self.config.get('sync', {}).get('patterns', ['*.xpo'])
        if isinstance(configured, str):
            # Environment overrides arrive as a comma separated string
            configured = [p.strip() for p in configured.split(',') if p.strip()]
        return list(configured)

    def folder_sync(
        self,
        repo_path: str,
        folder_path: str,
        force: bool = False,
        source: Optional[str] = None,
        patterns: Optional[Iterable[str]] = None,
    ) -> List[HistoryRecord]:
        """
        Check out folder_path at the HEAD tip and report the files of interest.

        Args:
            repo_path: Repository root
            folder_path: Folder to synchronise (absolute or repo-relative)
            force: Overwrite local changes
            source: 'tree' to list files from the tip tree, 'filesystem' to
                list them from disk (default from config)
            patterns: File name globs (default from config)

        Returns:
            One record per matching file, tagged "Update" at the tip commit

        Raises:
            CheckoutConflictError: Local changes block a non-forced checkout
        """
        source = source or self.config.get('sync', {}).get('source', SOURCE_TREE)
        if source not in ENUMERATORS:
            raise ConfigError(f"Unknown sync source: {source} (expected one of: {', '.join(ENUMERATORS)})")
        patterns = self._patterns(patterns)

        with self.open_repository(repo_root_path(repo_path)) as handle:
            tip_id = handle.head_id()
            if tip_id is None:
                raise ObjectNotFoundError('HEAD', "Repository has no commits to sync from")

            folder = normalize_path(handle.root, resolve_file_path(handle.root, folder_path))
            if folder == handle.root:
                folder = ''

            handle.checkout_paths(tip_id, [folder], force=force)

            tip = handle.lookup(tip_id)
            tip_ref = CommitRef.from_commit(tip)
            records = []
            for path in ENUMERATORS[source](handle, tip, folder, patterns):
                record = HistoryRecord.from_commit(
                    tip_ref,
                    item_path=path,
                    internal_filename=handle.working_path(path),
                    filename=handle.working_path(path),
                    file_status=map_status(handle.status_flags(path)),
                )
                record.action = ACTION_UPDATE
                records.append(record)

        logger.info(f"Synchronised {folder or '/'} to {tip_ref.short_id}: {len(records)} file(s)")
        return records

    def files_in_index(self, repo_path: str) -> List[HistoryRecord]:
        """
        Every file whose status is neither Unaltered nor Ignored.

        Staged content is materialized from the index blob; files without an
        index entry are copied from the working tree as they are.
        """
        temp_dir = get_temp_dir(self.config)

        with self.open_repository(repo_root_path(repo_path)) as handle:
            if not handle.is_dirty():
                logger.debug("Working tree matches HEAD, nothing to list")
                return []

            changes = [
                (path, map_status(flags)) for path, flags in handle.iter_status()
                if map_status(flags) not in (FileStatus.UNALTERED, FileStatus.IGNORED)
            ]

            records = []
            for path, status in changes:
                full_path = handle.working_path(path)
                staged = handle.index_entry(path)

                if staged is not None and stat.S_IFMT(staged[0]) != MODE_GITLINK:
                    blob_id = staged[1].decode('ascii')
                    artifact = materialize_to_destination(
                        handle, path, blob_id, temp_artifact_path(temp_dir, blob_id, path),
                    )
                    record = HistoryRecord(
                        item_path=path,
                        internal_filename=full_path,
                        filename=artifact,
                        sha=blob_id,
                        sha_short=blob_id[:7],
                        file_status=status,
                    )
                else:
                    # No index entry: a new file, untracked content
                    artifact = ""
                    if os.path.isfile(full_path):
                        artifact = os.path.join(temp_dir, os.path.basename(full_path))
                        shutil.copyfile(full_path, artifact)
                    record = HistoryRecord(
                        item_path=path,
                        internal_filename=full_path,
                        filename=artifact,
                        file_status=status,
                    )
                records.append(record)

        logger.info(f"Found {len(records)} changed file(s)")
        return records
