"""Tests for change detection."""

import zipfile
from unittest.mock import Mock, patch

import pytest

from deploy_sync.constants import ChangeMethod
from deploy_sync.core.change_resolver import (
    ChangeSetResolver,
    classify_name_status,
    diff_hashes,
)
from deploy_sync.core.local_tree import LocalTree
from deploy_sync.core.package_builder import PackageBuilder
from deploy_sync.core.path_filter import PathFilter
from deploy_sync.models.changeset import ChangeSet
from deploy_sync.models.metadata import DependencyInfo, DeploymentMetadata, VcsInfo
from deploy_sync.utils.git_utils import NameStatusEntry, diff_name_status, parse_name_status
from deploy_sync.utils.hash_utils import calculate_md5

from conftest import write


@pytest.fixture
def tree(project):
    """Local tree with the tracking filter."""
    return LocalTree(project, PathFilter.for_tracking([".env", "tests", "storage/logs"], "vendor"))


@pytest.fixture
def resolver(tree):
    """Resolver without version control."""
    return ChangeSetResolver(tree)


def metadata_for(tree, files, **kwargs):
    """Build a previous deployment record for the tree."""
    return DeploymentMetadata(
        environment="production",
        deployed_at="2024-01-01T00:00:00+00:00",
        files=files,
        dependencies=DependencyInfo(
            manifest_hash=calculate_md5(tree.absolute("composer.json")),
            lock_hash=calculate_md5(tree.absolute("composer.lock")),
            vendor_included=True
        ),
        **kwargs
    )


class TestChangeSet:
    """Tests for the ChangeSet model."""

    def test_sets_are_disjoint(self):
        """Test added wins over modified and deleted."""
        changeset = ChangeSet(
            method=ChangeMethod.HASH_DIFF,
            added={"a", "b"},
            modified={"b", "c"},
            deleted={"a", "c", "d"},
        )
        assert changeset.added == {"a", "b"}
        assert changeset.modified == {"c"}
        assert changeset.deleted == {"d"}
        assert changeset.files_to_package == ["a", "b", "c"]

    def test_is_empty(self):
        """Test an empty change set."""
        assert ChangeSet(method=ChangeMethod.HASH_DIFF).is_empty


class TestDiffHashes:
    """Tests for hash map comparison."""

    def test_diff(self):
        """Test added, modified and deleted paths are detected."""
        added, modified, deleted = diff_hashes(
            {"a": "1", "b": "2", "c": "3"},
            {"b": "2", "c": "x", "d": "4"},
        )
        assert added == {"a"}
        assert modified == {"c"}
        assert deleted == {"d"}


class TestDiffNameStatus:
    """Tests for running git diff from the project directory."""

    @patch("deploy_sync.utils.git_utils.subprocess.run")
    def test_paths_relative_to_project(self, mock_run, project):
        """Test the diff is limited to and relative to the project subdirectory."""
        mock_run.return_value = Mock(stdout="M\0routes/web.php\0")

        entries = diff_name_status(project, "abc123", "def456")

        argv = mock_run.call_args[0][0]
        assert argv[:2] == ["git", "diff"]
        assert "--relative" in argv
        assert argv[-2:] == ["abc123", "def456"]
        assert mock_run.call_args[1]["cwd"] == project
        assert entries == [NameStatusEntry("M", "routes/web.php")]


class TestClassifyNameStatus:
    """Tests for sorting git name-status entries."""

    def test_synthetic_diff(self):
        """Test add, modify, delete and rename are classified."""
        output = "\0".join([
            "A", "app/New.php",
            "M", "routes/web.php",
            "D", "app/Old.php",
            "R100", "app/Before.php", "app/After.php",
            "M", ".env",
        ]) + "\0"

        entries = parse_name_status(output)
        added, modified, deleted = classify_name_status(entries, PathFilter([".env"]))

        assert added == {"app/New.php", "app/After.php"}
        assert modified == {"routes/web.php"}
        assert deleted == {"app/Old.php", "app/Before.php"}

    def test_copy_only_adds(self):
        """Test a copy keeps the source path."""
        entries = [NameStatusEntry("C75", "a.php", "b.php")]
        added, modified, deleted = classify_name_status(entries, PathFilter())
        assert added == {"b.php"}
        assert not modified and not deleted

    def test_unknown_status_ignored(self):
        """Test unmerged or unknown entries are skipped."""
        entries = [NameStatusEntry("U", "conflict.php"), NameStatusEntry("T", "link")]
        added, modified, deleted = classify_name_status(entries, PathFilter())
        assert modified == {"link"}
        assert not added and not deleted


class TestResolve:
    """Tests for ChangeSetResolver.resolve."""

    def test_first_deployment_is_full(self, resolver):
        """Test no previous record ships everything."""
        changeset = resolver.resolve(None)

        assert changeset.method == ChangeMethod.FULL
        assert changeset.is_first_deployment
        assert changeset.include_vendor
        assert changeset.include_bootstrap
        assert "app/Http/Controller.php" in changeset.added
        assert ".env" not in changeset.added
        assert not any(path.startswith("vendor/") for path in changeset.added)
        assert changeset.current_hashes.keys() == changeset.added

    def test_hash_diff_twice_is_empty(self, tree, resolver):
        """Test resolving against the record of a deployment yields nothing."""
        first = resolver.resolve(None)
        previous = metadata_for(tree, first.current_hashes)

        second = resolver.resolve(previous)

        assert second.method == ChangeMethod.HASH_DIFF
        assert second.is_empty
        assert not second.include_vendor
        assert not second.include_bootstrap

    def test_hash_diff_detects_changes(self, project, tree, resolver):
        """Test edits, additions and removals are found by hashing."""
        previous = metadata_for(tree, resolver.resolve(None).current_hashes)

        write(project / "routes" / "web.php", "<?php // changed")
        write(project / "app" / "Jobs" / "SendMail.php", "<?php // job")
        (project / "app" / "Models" / "User.php").unlink()

        changeset = resolver.resolve(previous)

        assert changeset.added == {"app/Jobs/SendMail.php"}
        assert changeset.modified == {"routes/web.php"}
        assert changeset.deleted == {"app/Models/User.php"}

    def test_excluded_changes_are_ignored(self, project, tree, resolver):
        """Test edits to excluded files do not show up."""
        previous = metadata_for(tree, resolver.resolve(None).current_hashes)
        write(project / ".env", "APP_KEY=changed")
        write(project / "storage" / "logs" / "laravel.log", "error")

        assert resolver.resolve(previous).is_empty

    def test_bootstrap_forced(self, tree, resolver):
        """Test bootstrap directories can be forced on an incremental run."""
        previous = metadata_for(tree, resolver.resolve(None).current_hashes)
        assert resolver.resolve(previous, bootstrap=True).include_bootstrap

    def test_vcs_diff_used_when_available(self, tree):
        """Test a recorded commit and available git select the VCS diff."""
        vcs = Mock()
        vcs.is_available.return_value = True
        vcs.head_commit.return_value = "bbb"
        vcs.diff.return_value = [
            NameStatusEntry("M", "routes/web.php"),
            NameStatusEntry("D", "app/Old.php"),
        ]
        resolver = ChangeSetResolver(tree, vcs)
        previous = metadata_for(tree, None, vcs=VcsInfo(available=True, commit_hash="aaa"))

        changeset = resolver.resolve(previous)

        vcs.diff.assert_called_once_with("aaa", "bbb")
        assert changeset.method == ChangeMethod.VCS_DIFF
        assert changeset.modified == {"routes/web.php"}
        assert changeset.deleted == {"app/Old.php"}
        assert changeset.vcs_commit == "bbb"
        assert changeset.vcs_previous_commit == "aaa"

    def test_vcs_failure_falls_back_to_hashes(self, tree):
        """Test a failing git diff falls back to hash comparison."""
        vcs = Mock()
        vcs.is_available.return_value = True
        vcs.head_commit.return_value = "bbb"
        vcs.diff.return_value = None
        resolver = ChangeSetResolver(tree, vcs)
        previous = metadata_for(tree, {}, vcs=VcsInfo(available=True, commit_hash="unknown"))

        changeset = resolver.resolve(previous)

        assert changeset.method == ChangeMethod.HASH_DIFF
        assert "routes/web.php" in changeset.added


class TestVendorPolicy:
    """Tests for shipping the dependency directory."""

    def test_unchanged_dependencies(self, tree, resolver):
        """Test matching fingerprints keep vendor out."""
        assert not resolver.should_include_vendor(metadata_for(tree, {}))

    def test_lock_changed(self, project, tree, resolver):
        """Test a changed lock file ships vendor."""
        previous = metadata_for(tree, {})
        write(project / "composer.lock", '{"packages": ["new"]}')
        assert resolver.should_include_vendor(previous)

    def test_no_recorded_dependencies(self, tree, resolver):
        """Test a record without dependency info ships vendor."""
        previous = DeploymentMetadata(environment="production", deployed_at="", files={})
        assert resolver.should_include_vendor(previous)

    def test_no_manifest(self, project, tree, resolver):
        """Test a project without a manifest never ships vendor."""
        (project / "composer.json").unlink()
        assert not resolver.should_include_vendor(None)


class TestFirstDeploymentPackage:
    """Tests for the package produced by a first deployment."""

    def test_package_contains_vendor_and_empty_storage_dirs(self, tmp_path, tree, resolver):
        """Test first deployment ships vendor and empty bootstrap directories."""
        builder = PackageBuilder(tree)
        result = builder.build(resolver.resolve(None), tmp_path / "deploy.zip", "production")

        names = zipfile.ZipFile(result.archive_path).namelist()
        assert "vendor/autoload.php" in names
        assert "storage/logs/" in names
        assert "storage/framework/cache/" in names
        assert "bootstrap/cache/" in names
        assert ".deploy-meta.json" in names
        assert result.metadata.deployment_type == "full"
