"""
Infrastructure layer for gitax.

Wraps the repository backend (dulwich):
- RepositoryHandle: Scoped session over one repository
- init_repository / backend_version: Repository creation and library version
"""

from .git_backend import RepositoryHandle, backend_version, init_repository

__all__ = [
    'RepositoryHandle',
    'backend_version',
    'init_repository',
]
