"""
Service layer for gitax.

Contains the logic that turns backend primitives into results:
- HistoryService: File history, existence and status
- MaterializeService: Historical versions and undo
- SyncService: Folder sync and dirty-file listing

Services are the primary API for commands to use.
"""

from .history_service import HistoryService, resolve_history
from .materialize_service import MaterializeService, materialize_by_commit, materialize_to_destination
from .sync_service import SyncService
from .tree_walker import walk_tree, extension_filter

__all__ = [
    'HistoryService',
    'MaterializeService',
    'SyncService',
    'resolve_history',
    'materialize_by_commit',
    'materialize_to_destination',
    'walk_tree',
    'extension_filter',
]
