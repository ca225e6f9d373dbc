"""Tests for gitax path helpers."""

import os

import pytest

from gitax.utils import artifact_extension, normalize_path, repo_root_path, resolve_file_path


class TestNormalizePath:
    """Tests for normalize_path()."""

    def test_strips_root(self):
        """Test the root and the separator after it are removed."""
        root = os.path.join(os.sep, 'repo')
        path = os.path.join(root, 'Classes', 'Foo.xpo')
        assert normalize_path(root, path) == 'Classes/Foo.xpo'

    def test_root_with_trailing_separator(self):
        """Test a root ending in a separator gives the same result."""
        root = os.path.join(os.sep, 'repo')
        path = os.path.join(root, 'Classes', 'Foo.xpo')
        assert normalize_path(root + os.sep, path) == 'Classes/Foo.xpo'

    def test_path_outside_root_unchanged(self):
        """Test a path not under the root comes back as it was."""
        root = os.path.join(os.sep, 'repo')
        other = os.path.join(os.sep, 'elsewhere', 'Foo.xpo')
        assert normalize_path(root, other) == other

    def test_sibling_with_common_prefix_unchanged(self):
        """Test /repo2/x is not treated as inside /repo."""
        root = os.path.join(os.sep, 'repo')
        sibling = os.path.join(os.sep, 'repo2', 'Foo.xpo')
        assert normalize_path(root, sibling) == sibling

    def test_idempotent(self):
        """Test normalizing an already relative path is a no-op."""
        root = os.path.join(os.sep, 'repo')
        once = normalize_path(root, os.path.join(root, 'a', 'b.txt'))
        assert normalize_path(root, once) == once

    def test_round_trip(self):
        """Test joining the relative path back onto the root restores it."""
        root = os.path.join(os.sep, 'repo')
        path = os.path.join(root, 'Data Dictionary', 'Tables', 'Cust.xpo')
        relative = normalize_path(root, path)
        assert os.path.join(root, *relative.split('/')) == path

    def test_root_itself_unchanged(self):
        """Test the root is not a path inside itself."""
        root = os.path.join(os.sep, 'repo')
        assert normalize_path(root, root) == root


class TestResolveFilePath:
    """Tests for resolve_file_path()."""

    def test_absolute_path_kept(self):
        """Test absolute paths are only normalised."""
        root = os.path.join(os.sep, 'repo')
        path = os.path.join(root, 'a', '..', 'b.txt')
        assert resolve_file_path(root, path) == os.path.join(root, 'b.txt')

    def test_relative_path_joined_to_root(self):
        """Test relative paths are taken relative to the root."""
        root = os.path.join(os.sep, 'repo')
        assert resolve_file_path(root, 'Classes/Foo.xpo') == os.path.join(root, 'Classes', 'Foo.xpo')


class TestHelpers:
    """Tests for the small helpers."""

    def test_repo_root_path_is_absolute(self, tmp_path, monkeypatch):
        """Test relative roots are made absolute."""
        monkeypatch.chdir(tmp_path)
        assert repo_root_path('sub') == os.path.join(os.getcwd(), 'sub')

    @pytest.mark.parametrize("path,ext", [
        ('Classes/Foo.xpo', '.xpo'),
        ('README', ''),
        ('archive.tar.gz', '.gz'),
    ])
    def test_artifact_extension(self, path, ext):
        """Test the extension includes its dot."""
        assert artifact_extension(path) == ext
