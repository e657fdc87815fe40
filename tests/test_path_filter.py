"""Tests for exclusion rules and the local tree walker."""

import pytest

from deploy_sync.constants import METADATA_FILE, LEGACY_METADATA_FILE
from deploy_sync.core.local_tree import LocalTree
from deploy_sync.core.path_filter import PathFilter, is_excluded

from conftest import write


class TestIsExcluded:
    """Tests for matching a single path against rules."""

    @pytest.mark.parametrize("path", ["logs", "logs/app.log", "a/logs", "a/logs/b"])
    def test_bare_name_matches_at_any_depth(self, path):
        """Test a bare rule catches the name itself and anything below it."""
        assert is_excluded(path, ["logs"])

    def test_bare_name_does_not_match_substring(self):
        """Test a bare rule does not match a longer segment."""
        assert not is_excluded("backlogs", ["logs"])
        assert not is_excluded("app/backlogs/x.txt", ["logs"])

    def test_glob_rule(self):
        """Test wildcard rules match file names anywhere."""
        assert is_excluded("storage/debug.log", ["*.log"])
        assert is_excluded("error.log", ["*.log"])
        assert not is_excluded("logbook.txt", ["*.log"])

    def test_nested_rule(self):
        """Test a rule with a slash matches that subtree only."""
        rules = ["storage/logs"]
        assert is_excluded("storage/logs/laravel.log", rules)
        assert not is_excluded("storage/app/file.txt", rules)

    def test_rules_and_paths_are_normalized(self):
        """Test surrounding slashes and backslashes are ignored."""
        assert is_excluded("\\public\\hot", ["/public/hot/"])

    def test_empty_rules_exclude_nothing(self):
        """Test that blank rules are ignored."""
        assert not is_excluded("app/User.php", ["", "  "])


class TestPathFilter:
    """Tests for the PathFilter object."""

    def test_duplicate_rules_collapsed(self):
        """Test repeated rules are stored once."""
        path_filter = PathFilter(["vendor", "/vendor/", "cache"])
        assert path_filter.rules == ["vendor", "cache"]

    def test_contains(self):
        """Test the in operator."""
        path_filter = PathFilter([".env"])
        assert ".env" in path_filter
        assert "config/app.php" not in path_filter

    def test_for_tracking_excludes_dependencies_and_metadata(self):
        """Test the tracking filter hides the vendor dir and metadata files."""
        path_filter = PathFilter.for_tracking([".git"], "vendor")
        assert path_filter.is_excluded("vendor/autoload.php")
        assert path_filter.is_excluded(METADATA_FILE)
        assert path_filter.is_excluded(LEGACY_METADATA_FILE)
        assert not path_filter.is_excluded("app/vendorless.php")


class TestLocalTree:
    """Tests for walking the project tree."""

    def test_iter_files_prunes_excluded(self, project):
        """Test excluded files and directories are not yielded."""
        tree = LocalTree(project, PathFilter.for_tracking([".env", "tests"], "vendor"))
        files = list(tree.iter_files())

        assert "app/Http/Controller.php" in files
        assert "composer.json" in files
        assert ".env" not in files
        assert not any(f.startswith("vendor/") for f in files)
        assert not any(f.startswith("tests/") for f in files)
        assert not any(f.startswith("node_modules/") for f in files)

    def test_iter_files_is_sorted_per_directory(self, tmp_path):
        """Test walk order is deterministic."""
        for name in ["b.txt", "a.txt", "c.txt"]:
            write(tmp_path / name, name)

        assert list(LocalTree(tmp_path).iter_files()) == ["a.txt", "b.txt", "c.txt"]

    def test_hash_files(self, tmp_path):
        """Test fingerprints are MD5 digests keyed by relative path."""
        write(tmp_path / "dir" / "file.txt", "hello")

        hashes = LocalTree(tmp_path).hash_files()

        assert hashes == {"dir/file.txt": "5d41402abc4b2a76b9719d911017c592"}

    def test_iter_subtree_includes_empty_dirs(self, project):
        """Test subtree walk reports directories when asked."""
        entries = list(LocalTree(project).iter_subtree("storage", include_dirs=True))

        assert entries[0] == ("storage", True)
        assert ("storage/logs", True) in entries
        assert ("storage/framework/cache", True) in entries
        assert ("storage/app/.gitignore", False) in entries

    def test_iter_subtree_missing_dir(self, tmp_path):
        """Test a missing directory yields nothing."""
        assert list(LocalTree(tmp_path).iter_subtree("vendor")) == []
