"""
Domain layer for gitax.

Contains plain domain objects with no I/O or side effects:
- CommitRef: Commit metadata snapshot
- TreeEntry: A node of a commit tree
- HistoryRecord: One row of a result collection
- FileStatus / StatusFlag: Working-tree status and its backend bits
"""

from .history import CommitRef, HistoryRecord, ACTION_UPDATE, SHORT_SHA_LENGTH
from .status import FileStatus, StatusFlag, map_status
from .tree import TreeEntry

__all__ = [
    'CommitRef',
    'HistoryRecord',
    'ACTION_UPDATE',
    'SHORT_SHA_LENGTH',
    'FileStatus',
    'StatusFlag',
    'map_status',
    'TreeEntry',
]
