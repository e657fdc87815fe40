"""Change detection between the local tree and the last deployment"""

import logging
from typing import Dict, Iterable, Optional, Protocol, List, Tuple, Set

from .local_tree import LocalTree
from .path_filter import PathFilter
from ..constants import ChangeMethod
from ..models.changeset import ChangeSet
from ..models.config import DependencyConfig
from ..models.metadata import DeploymentMetadata
from ..utils.git_utils import NameStatusEntry
from ..utils.hash_utils import calculate_optional_md5

logger = logging.getLogger(__name__)


class VersionControl(Protocol):
    """What the resolver needs from a version control system"""

    def is_available(self) -> bool: ...

    def head_commit(self) -> Optional[str]: ...

    def diff(self, from_commit: str, to_commit: str) -> Optional[List[NameStatusEntry]]: ...


def classify_name_status(
        entries: Iterable[NameStatusEntry],
        path_filter: PathFilter
) -> Tuple[Set[str], Set[str], Set[str]]:
    """
    Sort VCS diff entries into added, modified and deleted paths

    A rename becomes a deletion of the old path plus an addition of the
    new one; a copy only adds the new path. Excluded paths are dropped.

    Args:
        entries: Parsed name-status entries
        path_filter: Tracking filter

    Returns:
        Tuple of (added, modified, deleted)
    """
    added, modified, deleted = set(), set(), set()

    def keep(path: str) -> bool:
        return bool(path) and not path_filter.is_excluded(path)

    for entry in entries:
        kind = entry.kind
        if kind == 'A':
            if keep(entry.path):
                added.add(entry.path)
        elif kind in ('M', 'T'):
            if keep(entry.path):
                modified.add(entry.path)
        elif kind == 'D':
            if keep(entry.path):
                deleted.add(entry.path)
        elif kind == 'R':
            if keep(entry.path):
                deleted.add(entry.path)
            if entry.new_path and keep(entry.new_path):
                added.add(entry.new_path)
        elif kind == 'C':
            if entry.new_path and keep(entry.new_path):
                added.add(entry.new_path)
        else:
            logger.debug(f"Ignoring diff status {entry.status} for {entry.path}")

    return added, modified, deleted


def diff_hashes(
        current: Dict[str, str],
        previous: Dict[str, str]
) -> Tuple[Set[str], Set[str], Set[str]]:
    """
    Compare two path-to-hash maps

    Args:
        current: Hashes of the local tree now
        previous: Hashes recorded by the last deployment

    Returns:
        Tuple of (added, modified, deleted)
    """
    added = {path for path in current if path not in previous}
    modified = {path for path, digest in current.items()
                if path in previous and previous[path] != digest}
    deleted = {path for path in previous if path not in current}
    return added, modified, deleted


class ChangeSetResolver:
    """Computes which files a deployment has to ship or remove"""

    def __init__(self,
                 tree: LocalTree,
                 vcs: Optional[VersionControl] = None,
                 dependencies: Optional[DependencyConfig] = None):
        """
        Args:
            tree: Local tree snapshot access (carries the tracking filter)
            vcs: Version control access, None to always use hashing
            dependencies: Dependency directory and manifest names
        """
        self.tree = tree
        self.vcs = vcs
        self.dependencies = dependencies or DependencyConfig()

    def _vcs_available(self) -> bool:
        if self.vcs is None:
            return False
        try:
            return bool(self.vcs.is_available())
        except OSError as e:
            logger.warning(f"Version control unavailable: {e}")
            return False

    def resolve(self,
                previous: Optional[DeploymentMetadata],
                bootstrap: bool = False) -> ChangeSet:
        """
        Compute the change set for one deployment attempt

        Args:
            previous: Metadata of the last deployment, None if there was none
            bootstrap: Ship the bootstrap directories even when incremental

        Returns:
            ChangeSet
        """
        vcs_available = self._vcs_available()

        if previous is None:
            changeset = self._resolve_full()
        elif vcs_available and previous.vcs.commit_hash:
            changeset = self._resolve_vcs(previous.vcs.commit_hash)
            if changeset is None:
                logger.warning(
                    f"Git diff against {previous.vcs.commit_hash} failed, falling back to file hashes"
                )
                changeset = self._resolve_hashes(previous)
        else:
            changeset = self._resolve_hashes(previous)

        changeset.vcs_available = vcs_available
        if previous is not None:
            changeset.include_vendor = self.should_include_vendor(previous)
        if bootstrap:
            changeset.include_bootstrap = True

        logger.info(
            f"Detected changes via {changeset.method.value}: "
            f"{len(changeset.added)} added, {len(changeset.modified)} modified, "
            f"{len(changeset.deleted)} deleted"
        )
        return changeset

    def _resolve_full(self) -> ChangeSet:
        hashes = self.tree.hash_files()
        return ChangeSet(
            method=ChangeMethod.FULL,
            added=set(hashes),
            include_vendor=True,
            include_bootstrap=True,
            is_first_deployment=True,
            current_hashes=hashes,
        )

    def _resolve_vcs(self, previous_commit: str) -> Optional[ChangeSet]:
        current_commit = self.vcs.head_commit()
        if not current_commit:
            return None

        entries = self.vcs.diff(previous_commit, current_commit)
        if entries is None:
            return None

        added, modified, deleted = classify_name_status(entries, self.tree.path_filter)
        return ChangeSet(
            method=ChangeMethod.VCS_DIFF,
            added=added,
            modified=modified,
            deleted=deleted,
            vcs_commit=current_commit,
            vcs_previous_commit=previous_commit,
        )

    def _resolve_hashes(self, previous: DeploymentMetadata) -> ChangeSet:
        current = self.tree.hash_files()
        added, modified, deleted = diff_hashes(current, previous.files or {})
        return ChangeSet(
            method=ChangeMethod.HASH_DIFF,
            added=added,
            modified=modified,
            deleted=deleted,
            current_hashes=current,
        )

    def dependency_hashes(self) -> Tuple[Optional[str], Optional[str]]:
        """Current (manifest_hash, lock_hash) of the local tree"""
        return (
            calculate_optional_md5(self.tree.absolute(self.dependencies.manifest)),
            calculate_optional_md5(self.tree.absolute(self.dependencies.lock)),
        )

    def should_include_vendor(self, previous: Optional[DeploymentMetadata]) -> bool:
        """
        Decide whether the dependency directory must be shipped

        Args:
            previous: Metadata of the last deployment

        Returns:
            True if dependencies changed or were never recorded
        """
        manifest_hash, lock_hash = self.dependency_hashes()

        if manifest_hash is None:
            # No dependency manifest, nothing to ship
            return False

        if previous is None or previous.dependencies is None:
            return True

        recorded = previous.dependencies
        if recorded.manifest_hash != manifest_hash:
            return True

        return recorded.lock_hash != lock_hash
