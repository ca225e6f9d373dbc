"""
History service for gitax.

Resolves which commits changed a file and builds the history records the
ERP client shows for it.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..config import get_temp_dir, load_config
from ..domain.history import CommitRef, HistoryRecord
from ..domain.status import map_status
from ..exit_codes import RepositoryIOError
from ..infra.git_backend import RepositoryHandle
from ..utils import normalize_path, repo_root_path, resolve_file_path
from .materialize_service import materialize_to_destination, temp_artifact_path

logger = logging.getLogger(__name__)


def changed_path(handle: RepositoryHandle, commit, path: str) -> bool:
    """
    True if commit changed path relative to its only parent.

    Merge commits and root commits never count: with more than one parent
    the change is ambiguous, and with none there is nothing to compare.
    """
    if len(commit.parents) != 1:
        return False

    current = handle.commit_entry(commit, path)
    if current is None:
        return False

    parent = handle.lookup(commit.parents[0])
    previous = handle.commit_entry(parent, path)
    return previous is None or previous[1] != current[1]


def resolve_history(handle: RepositoryHandle, target_path: str) -> Iterator[CommitRef]:
    """
    Commits reachable from HEAD that changed target_path, newest first.

    Args:
        handle: Open repository handle
        target_path: Repo-relative path

    Yields:
        CommitRef for every single-parent commit whose tree holds a new or
        different blob at target_path

    Raises:
        RepositoryIOError: If reading objects fails
    """
    try:
        for commit in handle.walk_commits():
            if changed_path(handle, commit, target_path):
                logger.debug(f"{commit.id.decode('ascii')[:7]} changed {target_path}")
                yield CommitRef.from_commit(commit)
    except RepositoryIOError:
        raise
    except OSError as e:
        raise RepositoryIOError(e.errno, f"Cannot read history of {target_path}: {e.strerror or e}", e.filename) from e


class HistoryService:
    """
    Service for file history queries.

    Each call opens its own repository handle and closes it before
    returning; nothing is cached between calls.

    Example:
        service = HistoryService()
        for record in service.file_history("/repo", "/repo/Classes/Foo.xpo"):
            print(record.sha_short, record.short_comment)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        handle_factory: Callable[[str], RepositoryHandle] = RepositoryHandle,
    ):
        self.config = config or load_config()
        self.open_repository = handle_factory

    def _open(self, repo_path: str) -> RepositoryHandle:
        try:
            return self.open_repository(repo_root_path(repo_path))
        except RepositoryIOError:
            raise
        except OSError as e:
            raise RepositoryIOError(e.errno, f"Cannot open repository: {e.strerror or e}", repo_path) from e

    def file_history(self, repo_path: str, file_path: str) -> List[HistoryRecord]:
        """
        History records for every commit that changed file_path.

        Each record carries the commit metadata, the working file's current
        status and a materialized copy of the file as of that commit.

        Raises:
            RepositoryIOError: If the repository cannot be opened or read;
                no partial result is returned
        """
        temp_dir = get_temp_dir(self.config)
        with self._open(repo_path) as handle:
            full_path = resolve_file_path(handle.root, file_path)
            item_path = normalize_path(handle.root, full_path)

            commits = list(resolve_history(handle, item_path))
            status = map_status(handle.status_flags(item_path))

            records = []
            for commit in commits:
                artifact = materialize_to_destination(
                    handle, item_path, commit.id,
                    temp_artifact_path(temp_dir, commit.id, item_path),
                )
                records.append(HistoryRecord.from_commit(
                    commit,
                    item_path=item_path,
                    internal_filename=full_path,
                    filename=artifact,
                    file_status=status,
                ))

        logger.info(f"Found {len(records)} commit(s) for {item_path}")
        return records

    def file_exists(self, repo_path: str, file_path: str) -> bool:
        """True if file_path exists in any commit reachable from HEAD."""
        with self._open(repo_path) as handle:
            item_path = normalize_path(handle.root, resolve_file_path(handle.root, file_path))
            return any(
                handle.commit_entry(commit, item_path) is not None
                for commit in handle.walk_commits()
            )

    def get_file_status(self, repo_path: str, file_name: str):
        """Working-tree status of one file."""
        with self._open(repo_path) as handle:
            item_path = normalize_path(handle.root, resolve_file_path(handle.root, file_name))
            return map_status(handle.status_flags(item_path))
