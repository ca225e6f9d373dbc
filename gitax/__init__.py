"""
gitax - File-level git history for ERP version control integration.

gitax answers, for a single tracked file: which commits changed it, what it
looked like at a given commit, and what its working-tree status is. It can
force a file back to a known-good version, synchronise a folder to the tip of
history, and list every modified-but-uncommitted file.

Quick Start:
    import gitax

    gx = gitax.GitAx()

    for record in gx.file_history("/repo", "/repo/Classes/Foo.xpo"):
        print(record.sha_short, record.user, record.short_comment)

    print(gx.get_file_status("/repo", "/repo/Classes/Foo.xpo"))

Domain Objects:
    CommitRef - Commit metadata snapshot
    HistoryRecord - One row of a result collection
    FileStatus - Working-tree status of a file
"""

__version__ = "0.4.0"

# High-level API
from .api import GitAx, create

# Domain objects
from .domain import (
    CommitRef,
    HistoryRecord,
    TreeEntry,
    FileStatus,
    StatusFlag,
    map_status,
)

# Services (for advanced use)
from .services import (
    HistoryService,
    MaterializeService,
    SyncService,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    "GitAx",
    "create",
    "CommitRef",
    "HistoryRecord",
    "TreeEntry",
    "FileStatus",
    "StatusFlag",
    "map_status",
    "HistoryService",
    "MaterializeService",
    "SyncService",
    "load_config",
    "save_config",
]
