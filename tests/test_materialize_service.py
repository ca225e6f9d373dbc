"""Tests for version materialization and undo."""

import os
from unittest.mock import patch

import pytest

from gitax.domain import FileStatus
from gitax.exit_codes import CheckoutConflictError, ForcedCheckoutError, ObjectNotFoundError
from gitax.infra import RepositoryHandle
from gitax.services import HistoryService, MaterializeService, materialize_by_commit

ORIGINAL = "Währung: €\r\nzweite Zeile\n"


@pytest.fixture
def two_versions(worktree):
    first = worktree.commit_files({'Classes/Foo.xpo': ORIGINAL}, "first")
    second = worktree.commit_files({'Classes/Foo.xpo': 'rewritten\n'}, "second")
    return worktree, first, second


class TestFileGetVersion:
    """Tests for MaterializeService.file_get_version()."""

    def test_to_destination_is_byte_identical(self, two_versions, config, tmp_path):
        """Test UTF-8 content and line endings survive unchanged."""
        worktree, first, _second = two_versions
        destination = str(tmp_path / "out" / "Foo.xpo")

        result = MaterializeService(config=config).file_get_version(
            worktree.path, 'Classes/Foo.xpo', first, destination,
        )

        assert result == destination
        with open(destination, 'rb') as f:
            assert f.read() == ORIGINAL.encode('utf-8')
        assert worktree.read('Classes/Foo.xpo') == 'rewritten\n'

    def test_destination_overwritten(self, two_versions, config, tmp_path):
        """Test an existing destination is fully replaced."""
        worktree, _first, second = two_versions
        destination = tmp_path / "Foo.xpo"
        destination.write_text("a much longer previous content\n" * 10)

        MaterializeService(config=config).file_get_version(
            worktree.path, 'Classes/Foo.xpo', second, str(destination),
        )
        assert destination.read_bytes() == b'rewritten\n'

    def test_blob_id(self, two_versions, config, tmp_path):
        """Test a content id works like a commit id."""
        worktree, first, _second = two_versions
        blob_id = worktree.blob_id('Classes/Foo.xpo', first)
        destination = str(tmp_path / "Foo.xpo")

        MaterializeService(config=config).file_get_version(
            worktree.path, 'Classes/Foo.xpo', blob_id, destination,
        )
        with open(destination, 'rb') as f:
            assert f.read() == ORIGINAL.encode('utf-8')

    def test_abbreviated_commit_id(self, two_versions, config, tmp_path):
        """Test short commit ids are accepted."""
        worktree, first, _second = two_versions
        destination = str(tmp_path / "Foo.xpo")
        MaterializeService(config=config).file_get_version(
            worktree.path, 'Classes/Foo.xpo', first[:7], destination,
        )
        assert os.path.exists(destination)

    def test_unknown_id(self, two_versions, config, tmp_path):
        """Test an unresolvable id raises ObjectNotFoundError."""
        worktree, _first, _second = two_versions
        with pytest.raises(ObjectNotFoundError):
            MaterializeService(config=config).file_get_version(
                worktree.path, 'Classes/Foo.xpo', 'deadbeef' * 5, str(tmp_path / "x"),
            )

    def test_file_missing_from_commit(self, worktree, config, tmp_path):
        """Test a commit without the file raises ObjectNotFoundError."""
        commit_id = worktree.commit_files({'a.txt': 'a\n'}, "first")
        with pytest.raises(ObjectNotFoundError):
            MaterializeService(config=config).file_get_version(
                worktree.path, 'b.txt', commit_id, str(tmp_path / "b.txt"),
            )

    def test_in_place_forced(self, two_versions, config):
        """Test without destination the working file is overwritten."""
        worktree, first, _second = two_versions
        worktree.write('Classes/Foo.xpo', 'local edit\n')

        result = MaterializeService(config=config).file_get_version(
            worktree.path, worktree.file('Classes/Foo.xpo'), first,
        )

        assert result == worktree.file('Classes/Foo.xpo')
        assert worktree.read('Classes/Foo.xpo') == ORIGINAL
        # Index now holds the old version, HEAD the new one
        status = HistoryService(config=config).get_file_status(worktree.path, 'Classes/Foo.xpo')
        assert status is FileStatus.STAGED


class TestMaterializeByCommit:
    """Tests for materialize_by_commit()."""

    def test_forced_conflict_is_fatal(self, two_versions):
        """Test a conflict reported under force becomes ForcedCheckoutError."""
        worktree, first, _second = two_versions
        with RepositoryHandle(worktree.path) as handle:
            with patch.object(handle, 'checkout_paths', side_effect=CheckoutConflictError(['Classes/Foo.xpo'])):
                with pytest.raises(ForcedCheckoutError):
                    materialize_by_commit(handle, 'Classes/Foo.xpo', first, force=True)

    def test_conservative_conflict_propagates(self, two_versions):
        """Test without force the conflict reaches the caller."""
        worktree, first, _second = two_versions
        worktree.write('Classes/Foo.xpo', 'local edit\n')
        with RepositoryHandle(worktree.path) as handle:
            with pytest.raises(CheckoutConflictError):
                materialize_by_commit(handle, 'Classes/Foo.xpo', first, force=False)


class TestFileUndoCheckout:
    """Tests for MaterializeService.file_undo_checkout()."""

    def test_forced_undo(self, two_versions, config):
        """Test local changes are replaced by the last committed change."""
        worktree, _first, _second = two_versions
        worktree.write('Classes/Foo.xpo', 'local edit\n')

        assert MaterializeService(config=config).file_undo_checkout(worktree.path, 'Classes/Foo.xpo', force=True)
        assert worktree.read('Classes/Foo.xpo') == 'rewritten\n'

    def test_conservative_undo_keeps_changes(self, two_versions, config):
        """Test a non-forced undo refuses to discard local changes."""
        worktree, _first, _second = two_versions
        worktree.write('Classes/Foo.xpo', 'local edit\n')

        assert not MaterializeService(config=config).file_undo_checkout(worktree.path, 'Classes/Foo.xpo')
        assert worktree.read('Classes/Foo.xpo') == 'local edit\n'

    def test_restores_deleted_file(self, two_versions, config):
        """Test a missing working file comes back."""
        worktree, _first, _second = two_versions
        os.remove(worktree.file('Classes/Foo.xpo'))

        assert MaterializeService(config=config).file_undo_checkout(worktree.path, 'Classes/Foo.xpo')
        assert worktree.read('Classes/Foo.xpo') == 'rewritten\n'

    def test_no_history(self, worktree, config):
        """Test a file only in the root commit cannot be undone."""
        worktree.commit_files({'a.txt': 'a\n'}, "first")
        assert not MaterializeService(config=config).file_undo_checkout(worktree.path, 'a.txt', force=True)
