"""
Path helpers shared by the gitax services.
"""

import os


def normalize_path(repo_root: str, absolute_path: str) -> str:
    """
    Convert an absolute file-system path into a repository-relative path.

    The repository root (and the separator after it) is stripped from the
    front of the path. A path outside the root is returned unchanged, so
    calling this on an already relative path is a no-op.

    Args:
        repo_root: Working directory of the repository
        absolute_path: Path to convert

    Returns:
        Path relative to the repository root, with '/' separators
    """
    root = repo_root.rstrip('/' + os.sep)
    prefix = root + os.sep

    if absolute_path.startswith(prefix):
        relative = absolute_path[len(prefix):]
    elif os.sep != '/' and absolute_path.startswith(root + '/'):
        relative = absolute_path[len(root) + 1:]
    else:
        return absolute_path

    return relative.replace(os.sep, '/')


def resolve_file_path(repo_root: str, file_path: str) -> str:
    """
    Absolute working-tree path for a caller-supplied file path.

    Relative paths are taken relative to the repository root.
    """
    return os.path.normpath(os.path.join(repo_root, os.path.expanduser(file_path)))


def repo_root_path(repo_path: str) -> str:
    """Absolute, normalised repository root."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(repo_path)))


def artifact_extension(path: str) -> str:
    """Extension (with dot) used for materialized copies of a path."""
    return os.path.splitext(path)[1]
