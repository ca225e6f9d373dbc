"""
File status domain objects for gitax.

StatusFlag holds the backend's status bits; FileStatus is the small, closed
set of states the ERP client understands. map_status() converts one into the
other.
"""

from enum import Enum, IntFlag


class StatusFlag(IntFlag):
    """Status bits reported by the repository backend for one path."""
    CURRENT = 0
    INDEX_NEW = 1 << 0
    INDEX_MODIFIED = 1 << 1
    INDEX_DELETED = 1 << 2
    INDEX_RENAMED = 1 << 3
    INDEX_TYPECHANGE = 1 << 4
    WT_NEW = 1 << 7
    WT_MODIFIED = 1 << 8
    WT_DELETED = 1 << 9
    WT_TYPECHANGE = 1 << 10
    WT_RENAMED = 1 << 11
    IGNORED = 1 << 14
    NONEXISTENT = 1 << 31


class FileStatus(Enum):
    """Application-facing file status."""
    UNALTERED = "Unaltered"
    ADDED = "Added"
    STAGED = "Staged"
    REMOVED = "Removed"
    RENAMED_IN_INDEX = "RenamedInIndex"
    STAGED_TYPE_CHANGE = "StagedTypeChange"
    UNTRACKED = "Untracked"
    MODIFIED = "Modified"
    MISSING = "Missing"
    TYPE_CHANGED = "TypeChanged"
    RENAMED_IN_WORK_DIR = "RenamedInWorkDir"
    IGNORED = "Ignored"
    NON_EXISTENT = "NonExistent"

    def __str__(self) -> str:
        return self.value


_STATUS_BY_FLAG = {
    int(StatusFlag.CURRENT): FileStatus.UNALTERED,
    int(StatusFlag.INDEX_NEW): FileStatus.ADDED,
    int(StatusFlag.INDEX_MODIFIED): FileStatus.STAGED,
    int(StatusFlag.INDEX_DELETED): FileStatus.REMOVED,
    int(StatusFlag.INDEX_RENAMED): FileStatus.RENAMED_IN_INDEX,
    int(StatusFlag.INDEX_TYPECHANGE): FileStatus.STAGED_TYPE_CHANGE,
    int(StatusFlag.WT_NEW): FileStatus.UNTRACKED,
    int(StatusFlag.WT_MODIFIED): FileStatus.MODIFIED,
    int(StatusFlag.WT_DELETED): FileStatus.MISSING,
    int(StatusFlag.WT_TYPECHANGE): FileStatus.TYPE_CHANGED,
    int(StatusFlag.WT_RENAMED): FileStatus.RENAMED_IN_WORK_DIR,
    int(StatusFlag.IGNORED): FileStatus.IGNORED,
}


def map_status(code: int) -> FileStatus:
    """
    Map a backend status code to a FileStatus.

    Only the clean code and the known single bits are recognised. Anything
    else, composite codes included, is NON_EXISTENT.
    """
    return _STATUS_BY_FLAG.get(int(code), FileStatus.NON_EXISTENT)
