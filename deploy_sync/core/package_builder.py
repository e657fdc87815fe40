"""Deployment package assembly"""

import logging
import time
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from .change_resolver import VersionControl
from .local_tree import LocalTree
from ..api.exceptions import PackError
from ..constants import METADATA_FILE, DEFAULT_BOOTSTRAP_DIRS, DeploymentType
from ..models.changeset import ChangeSet
from ..models.config import DependencyConfig
from ..models.metadata import DeploymentMetadata, DependencyInfo, VcsInfo
from ..models.result import PackResult
from ..utils.hash_utils import calculate_optional_md5

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _directory_info(arcname: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(arcname.rstrip("/") + "/")
    info.external_attr = (0o40755 << 16) | 0x10
    return info


class PackageBuilder:
    """Builds the ZIP archive shipped to the receiver"""

    def __init__(self,
                 tree: LocalTree,
                 dependencies: Optional[DependencyConfig] = None,
                 bootstrap_dirs: Optional[List[str]] = None,
                 vcs: Optional[VersionControl] = None):
        """
        Args:
            tree: Local tree access
            dependencies: Dependency directory and manifest names
            bootstrap_dirs: Directories shipped verbatim on first deployment
            vcs: Version control access for branch information
        """
        self.tree = tree
        self.dependencies = dependencies or DependencyConfig()
        self.bootstrap_dirs = list(DEFAULT_BOOTSTRAP_DIRS if bootstrap_dirs is None else bootstrap_dirs)
        self.vcs = vcs

    def collect_entries(self, changeset: ChangeSet) -> Iterator[Tuple[str, bool]]:
        """
        Yield the (path, is_dir) entries a change set puts in the package

        Args:
            changeset: Computed change set

        Yields:
            Entries in archive order; duplicates are possible
        """
        for relative_path in changeset.files_to_package:
            yield relative_path, False

        if changeset.include_vendor:
            yield from self.tree.iter_subtree(self.dependencies.directory)

        if changeset.include_bootstrap:
            for directory in self.bootstrap_dirs:
                yield from self.tree.iter_subtree(directory, include_dirs=True)

    def build_metadata(self,
                       changeset: ChangeSet,
                       environment: str,
                       files_count: int) -> DeploymentMetadata:
        """
        Describe the deployment this package performs

        Args:
            changeset: Computed change set
            environment: Target environment name
            files_count: Number of entries written to the package

        Returns:
            DeploymentMetadata embedded into the archive
        """
        if changeset.vcs_available and self.vcs is not None:
            vcs = VcsInfo(
                available=True,
                branch=self.vcs.branch() or "unknown",
                commit_hash=changeset.vcs_commit or self.vcs.head_commit(),
                previous_commit=changeset.vcs_previous_commit
            )
        else:
            vcs = VcsInfo(available=False)

        deployment_type = DeploymentType.FULL if changeset.is_first_deployment else DeploymentType.INCREMENTAL

        return DeploymentMetadata(
            environment=environment,
            deployed_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            deployment_type=deployment_type.value,
            deployed_files_count=files_count,
            deleted_files=sorted(changeset.deleted),
            vcs=vcs,
            dependencies=DependencyInfo(
                manifest_hash=calculate_optional_md5(self.tree.absolute(self.dependencies.manifest)),
                lock_hash=calculate_optional_md5(self.tree.absolute(self.dependencies.lock)),
                vendor_included=changeset.include_vendor
            ),
            files=dict(changeset.current_hashes) if changeset.current_hashes is not None else None,
            method=changeset.method.value
        )

    def build(self,
              changeset: ChangeSet,
              output_path: Path,
              environment: str = "default",
              progress: Optional[ProgressCallback] = None) -> PackResult:
        """
        Write the deployment package

        Args:
            changeset: Computed change set
            output_path: Archive path to create (overwritten if present)
            environment: Target environment name
            progress: Callback (entries_done, entries_total)

        Returns:
            PackResult

        Raises:
            PackError: If the archive cannot be opened for writing
        """
        start_time = time.time()
        output_path = Path(output_path)
        entries = list(self.collect_entries(changeset))
        total = len(entries)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            archive = zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED,
                                      strict_timestamps=False)
        except OSError as e:
            raise PackError(f"Cannot create package {output_path}: {e}") from e

        written = set()
        skipped = []

        with archive:
            for index, (relative_path, is_dir) in enumerate(entries, start=1):
                if relative_path not in written:
                    if self._add_entry(archive, relative_path, is_dir):
                        written.add(relative_path)
                    else:
                        skipped.append(relative_path)
                if progress:
                    progress(index, total)

            metadata = self.build_metadata(changeset, environment, len(written))
            archive.writestr(METADATA_FILE, metadata.to_json())

        logger.info(f"Packaged {len(written)} entries into {output_path} ({len(skipped)} skipped)")

        return PackResult(
            archive_path=output_path,
            metadata=metadata,
            files_added=len(written),
            files_skipped=skipped,
            archive_size=output_path.stat().st_size,
            duration=round(time.time() - start_time, 2)
        )

    def _add_entry(self, archive: zipfile.ZipFile, relative_path: str, is_dir: bool) -> bool:
        source = self.tree.absolute(relative_path)

        if not source.exists():
            logger.debug(f"Skipping missing source: {relative_path}")
            return False

        try:
            if is_dir or source.is_dir():
                archive.writestr(_directory_info(relative_path), b"")
            else:
                archive.write(source, relative_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping {relative_path}: {e}")
            return False

        return True
