"""Tests for backend status code mapping."""

import pytest

from gitax.domain import FileStatus, StatusFlag, map_status


class TestMapStatus:
    """Tests for map_status()."""

    @pytest.mark.parametrize("flag,expected", [
        (StatusFlag.CURRENT, FileStatus.UNALTERED),
        (StatusFlag.INDEX_NEW, FileStatus.ADDED),
        (StatusFlag.INDEX_MODIFIED, FileStatus.STAGED),
        (StatusFlag.INDEX_DELETED, FileStatus.REMOVED),
        (StatusFlag.INDEX_RENAMED, FileStatus.RENAMED_IN_INDEX),
        (StatusFlag.INDEX_TYPECHANGE, FileStatus.STAGED_TYPE_CHANGE),
        (StatusFlag.WT_NEW, FileStatus.UNTRACKED),
        (StatusFlag.WT_MODIFIED, FileStatus.MODIFIED),
        (StatusFlag.WT_DELETED, FileStatus.MISSING),
        (StatusFlag.WT_TYPECHANGE, FileStatus.TYPE_CHANGED),
        (StatusFlag.WT_RENAMED, FileStatus.RENAMED_IN_WORK_DIR),
        (StatusFlag.IGNORED, FileStatus.IGNORED),
    ])
    def test_single_flags(self, flag, expected):
        """Test every recognised code maps to its status."""
        assert map_status(flag) is expected

    def test_plain_ints_accepted(self):
        """Test raw integer codes map like their flags."""
        assert map_status(0) is FileStatus.UNALTERED
        assert map_status(1 << 8) is FileStatus.MODIFIED

    def test_nonexistent_flag(self):
        """Test the backend's nonexistent bit."""
        assert map_status(StatusFlag.NONEXISTENT) is FileStatus.NON_EXISTENT

    @pytest.mark.parametrize("code", [
        StatusFlag.INDEX_NEW | StatusFlag.WT_MODIFIED,
        StatusFlag.INDEX_DELETED | StatusFlag.WT_NEW,
        StatusFlag.INDEX_MODIFIED | StatusFlag.WT_DELETED,
    ])
    def test_composite_codes_are_nonexistent(self, code):
        """Test combined bits are not recognised."""
        assert map_status(code) is FileStatus.NON_EXISTENT

    @pytest.mark.parametrize("code", [1 << 5, 1 << 20, -1, 123456])
    def test_unknown_codes_are_nonexistent(self, code):
        """Test the mapping is total over arbitrary integers."""
        assert map_status(code) is FileStatus.NON_EXISTENT


class TestFileStatus:
    """Tests for FileStatus values."""

    def test_str_is_value(self):
        """Test str() gives the name the ERP client expects."""
        assert str(FileStatus.RENAMED_IN_WORK_DIR) == "RenamedInWorkDir"
        assert str(FileStatus.NON_EXISTENT) == "NonExistent"

    def test_thirteen_statuses(self):
        """Test the status set is closed."""
        assert len(FileStatus) == 13
