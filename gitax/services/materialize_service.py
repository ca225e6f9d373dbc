"""
Version materialization for gitax.

Extracts historical versions of a file, either back into the working tree
(a forced single-path checkout) or into a standalone file elsewhere.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional

from dulwich.objects import Blob, Commit

from ..config import load_config
from ..exit_codes import CheckoutConflictError, ForcedCheckoutError, ObjectNotFoundError
from ..infra.git_backend import RepositoryHandle
from ..utils import artifact_extension, normalize_path, repo_root_path, resolve_file_path

logger = logging.getLogger(__name__)


def temp_artifact_path(temp_dir: str, object_id: str, path: str) -> str:
    """Materialized copy location: <temp_dir>/<object id><extension of path>."""
    return os.path.join(temp_dir, object_id + artifact_extension(path))


def materialize_by_commit(
    handle: RepositoryHandle,
    path: str,
    commit_id: str,
    force: bool = True,
) -> str:
    """
    Check out path as of commit_id into the working tree.

    Args:
        handle: Open repository handle
        path: Repo-relative path
        commit_id: Commit to take the file from
        force: Overwrite local changes

    Returns:
        Absolute working-tree path of the file

    Raises:
        ForcedCheckoutError: A forced checkout reported a conflict
        CheckoutConflictError: A conservative checkout met local changes
        ObjectNotFoundError: commit_id does not resolve to a commit
    """
    resolved = handle.resolve_object_id(commit_id)
    try:
        handle.checkout_paths(resolved, [path], force=force)
    except CheckoutConflictError as e:
        if not force:
            raise
        # Forced checkouts overwrite everything; a conflict here means the
        # backend broke that promise.
        logger.critical(f"Conflict during forced checkout of {path} at {commit_id}: {e}")
        raise ForcedCheckoutError(f"Forced checkout of {path} at {commit_id} reported a conflict: {e}") from e
    return handle.working_path(path)


def _resolve_blob_id(handle: RepositoryHandle, path: str, object_id: str) -> bytes:
    resolved = handle.resolve_object_id(object_id)
    obj = handle.lookup(resolved)

    if isinstance(obj, Commit):
        entry = handle.commit_entry(obj, path)
        if entry is None:
            raise ObjectNotFoundError(object_id, f"{path} does not exist in commit {object_id}")
        return entry[1]

    if not isinstance(obj, Blob):
        raise ObjectNotFoundError(object_id, f"{object_id} is neither a commit nor file content")
    return resolved


def materialize_to_destination(
    handle: RepositoryHandle,
    path: str,
    object_id: str,
    destination: str,
) -> str:
    """
    Write a historical version of path to destination.

    object_id is either a commit (the blob at path in its tree is used) or a
    raw blob id, e.g. the staged content of an index entry. The content is
    decoded as UTF-8, with undecodable bytes replaced, and fully overwrites
    destination.

    Returns:
        destination

    Raises:
        ObjectNotFoundError: The id resolves to nothing usable
    """
    blob_id = _resolve_blob_id(handle, path, object_id)
    # Bytes that are not valid UTF-8 become U+FFFD
    text = handle.read_blob(blob_id).decode('utf-8', errors='replace')

    parent = os.path.dirname(destination)
    if parent:
        os.makedirs(parent, exist_ok=True)
    # newline='' keeps the blob's own line endings
    with open(destination, 'w', encoding='utf-8', newline='') as f:
        f.write(text)

    logger.debug(f"Materialized {path} @ {object_id[:7]} to {destination}")
    return destination


class MaterializeService:
    """
    Service for getting file versions out of history.

    Example:
        service = MaterializeService()
        service.file_get_version("/repo", "/repo/Foo.xpo", "1a2b3c4")
        service.file_get_version("/repo", "/repo/Foo.xpo", "1a2b3c4", "/tmp/Foo.xpo")
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        handle_factory: Callable[[str], RepositoryHandle] = RepositoryHandle,
    ):
        self.config = config or load_config()
        self.open_repository = handle_factory

    def file_get_version(
        self,
        repo_path: str,
        file_name: str,
        object_id: str,
        destination: Optional[str] = None,
    ) -> str:
        """
        Materialize one version of a file.

        Without destination the working file itself is replaced (forced
        checkout); with destination the content is written there instead.

        Returns:
            Path of the written file
        """
        with self.open_repository(repo_root_path(repo_path)) as handle:
            full_path = resolve_file_path(handle.root, file_name)
            item_path = normalize_path(handle.root, full_path)

            if destination is None:
                result = materialize_by_commit(handle, item_path, object_id, force=True)
            else:
                result = materialize_to_destination(handle, item_path, object_id, destination)

        logger.info(f"Materialized {item_path} @ {object_id[:7]} to {result}")
        return result

    def file_undo_checkout(self, repo_path: str, file_name: str, force: bool = False) -> bool:
        """
        Reset a file to the last commit that changed it.

        Returns:
            True if the file was reset, False if it has no history
        """
        from .history_service import resolve_history

        with self.open_repository(repo_root_path(repo_path)) as handle:
            item_path = normalize_path(handle.root, resolve_file_path(handle.root, file_name))

            last_change = next(resolve_history(handle, item_path), None)
            if last_change is None:
                logger.info(f"No history for {item_path}, nothing to undo")
                return False

            try:
                materialize_by_commit(handle, item_path, last_change.id, force=force)
            except CheckoutConflictError as e:
                logger.warning(f"Not resetting {item_path}: {e}")
                return False

        logger.info(f"Reset {item_path} to {last_change.short_id}")
        return True
