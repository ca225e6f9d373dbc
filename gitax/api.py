"""
High-level Python API for gitax.

One method per operation the ERP client calls. Every call opens the
repository, does its work and closes it again.

Example:
    import gitax

    gx = gitax.GitAx()

    # Commits that changed a file, with materialized copies
    for record in gx.file_history("/repo", "/repo/Classes/Foo.xpo"):
        print(record.sha_short, record.short_comment, record.filename)

    # Put an older version back into the working tree
    gx.file_get_version("/repo", "/repo/Classes/Foo.xpo", "1a2b3c4")

    # Or write it somewhere else
    gx.file_get_version("/repo", "/repo/Classes/Foo.xpo", "1a2b3c4", "/tmp/Foo.xpo")

    # Bring a folder up to date and list its .xpo files
    for record in gx.folder_sync("/repo", "/repo/Classes", force=True):
        print(record.item_path, record.action)
"""

import logging
from typing import Any, Dict, List, Optional

from .config import load_config
from .domain import FileStatus, HistoryRecord
from .infra import RepositoryHandle, backend_version, init_repository
from .services import HistoryService, MaterializeService, SyncService
from .utils import repo_root_path, resolve_file_path

logger = logging.getLogger(__name__)


class GitAx:
    """
    High-level API for gitax.

    Example:
        gx = GitAx()
        status = gx.get_file_status("/repo", "/repo/Classes/Foo.xpo")
        if status is FileStatus.MODIFIED:
            gx.file_undo_checkout("/repo", "/repo/Classes/Foo.xpo", force=True)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, handle_factory=RepositoryHandle):
        """
        Initialize GitAx.

        Args:
            config: Full config dict (loads the config file if None)
            handle_factory: Callable opening a repository handle from a path
        """
        self._config = config or load_config()
        self._history_service = HistoryService(config=self._config, handle_factory=handle_factory)
        self._materialize_service = MaterializeService(config=self._config, handle_factory=handle_factory)
        self._sync_service = SyncService(config=self._config, handle_factory=handle_factory)
        self._open_repository = handle_factory

    @property
    def history_service(self) -> HistoryService:
        return self._history_service

    @property
    def materialize_service(self) -> MaterializeService:
        return self._materialize_service

    @property
    def sync_service(self) -> SyncService:
        return self._sync_service

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    # =========================================================================
    # REPOSITORY
    # =========================================================================

    def init(self, repo_path: str) -> str:
        """Create a repository at repo_path."""
        return init_repository(repo_root_path(repo_path))

    def version(self) -> str:
        """Combined gitax and backend version string."""
        from . import __version__
        return f"gitax {__version__} - dulwich {backend_version()}"

    def is_root_folder(self, repo_path: str, path: str) -> bool:
        """True if path is the repository's working directory."""
        with self._open_repository(repo_root_path(repo_path)) as handle:
            return resolve_file_path(handle.root, path) == handle.root

    # =========================================================================
    # FILES
    # =========================================================================

    def file_history(self, repo_path: str, file_path: str) -> List[HistoryRecord]:
        """History records for every commit that changed the file."""
        return self._history_service.file_history(repo_path, file_path)

    def file_get_version(
        self,
        repo_path: str,
        file_name: str,
        object_id: str,
        destination: Optional[str] = None,
    ) -> str:
        """Check out a version in place, or write it to destination."""
        return self._materialize_service.file_get_version(repo_path, file_name, object_id, destination)

    def file_undo_checkout(self, repo_path: str, file_name: str, force: bool = False) -> bool:
        """Reset the file to its last committed change."""
        return self._materialize_service.file_undo_checkout(repo_path, file_name, force)

    def file_exists(self, repo_path: str, file_path: str) -> bool:
        """True if the file exists, or ever existed, on HEAD's history."""
        return self._history_service.file_exists(repo_path, file_path)

    def get_file_status(self, repo_path: str, file_name: str) -> FileStatus:
        """Working-tree status of the file."""
        return self._history_service.get_file_status(repo_path, file_name)

    # =========================================================================
    # FOLDERS AND INDEX
    # =========================================================================

    def folder_sync(
        self,
        repo_path: str,
        folder_path: str,
        force: bool = False,
        source: Optional[str] = None,
        patterns: Optional[List[str]] = None,
    ) -> List[HistoryRecord]:
        """Check out a folder at the HEAD tip and list its files of interest."""
        return self._sync_service.folder_sync(repo_path, folder_path, force, source, patterns)

    def get_files_in_index(self, repo_path: str) -> List[HistoryRecord]:
        """Every modified-but-uncommitted file, with materialized copies."""
        return self._sync_service.files_in_index(repo_path)


def create(config: Optional[Dict[str, Any]] = None) -> GitAx:
    """Create a GitAx instance."""
    return GitAx(config=config)
