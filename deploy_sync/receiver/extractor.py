"""Applying an uploaded deployment package to the target root"""

import importlib
import linecache
import logging
import re
import time
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from ..constants import METADATA_FILE, DeploymentType
from ..core.metadata_store import MetadataStore
from ..models.metadata import DeploymentMetadata
from ..models.result import ExtractionReport
from ..utils.file_utils import atomic_write_stream, is_plain_filename, is_within

logger = logging.getLogger(__name__)

_DRIVE_RE = re.compile(r'^[A-Za-z]:')


def safe_member_path(name: str) -> Optional[str]:
    """
    Normalize an archive member name

    Args:
        name: Member name as stored in the archive

    Returns:
        Relative POSIX path, or None if the name is absolute or escapes
    """
    normalized = name.replace('\\', '/')
    if normalized.startswith('/') or _DRIVE_RE.match(normalized):
        return None

    parts = [p for p in PurePosixPath(normalized).parts if p != '.']
    if not parts or '..' in parts:
        return None

    return '/'.join(parts)


@dataclass
class ExtractionOutcome:
    """Extraction report plus the metadata the package carried"""
    report: ExtractionReport
    metadata_extracted: bool = False
    metadata: Optional[DeploymentMetadata] = None
    package_found: bool = True

    @property
    def deleted_files(self):
        if self.metadata_extracted and self.metadata is not None:
            return list(self.metadata.deleted_files)
        return []


class ArchiveExtractor:
    """Extracts packages entry by entry, replacing each file atomically"""

    def __init__(self, target_root: Union[str, Path]):
        self.target_root = Path(target_root).resolve()

    def extract(self, zipname: str) -> ExtractionOutcome:
        """
        Apply the package named zipname found in the target root

        The archive is removed afterwards whatever the outcome.

        Args:
            zipname: Package file name

        Returns:
            ExtractionOutcome
        """
        start_time = time.time()

        if not is_plain_filename(zipname):
            return self._failed(f"Invalid package name: {zipname}", start_time, package_found=False)

        archive_path = self.target_root / zipname
        if not archive_path.is_file():
            logger.info(f"No package at {archive_path}")
            return self._failed(f"Package {zipname} not found", start_time, package_found=False)

        try:
            try:
                archive = zipfile.ZipFile(archive_path)
            except (zipfile.BadZipFile, OSError) as e:
                logger.error(f"Cannot open package {zipname}: {e}")
                return self._failed(f"Cannot open package {zipname}: {e}", start_time)

            with archive:
                outcome = self._extract_members(archive, start_time)
        finally:
            self._discard(archive_path)
            importlib.invalidate_caches()
            linecache.clearcache()

        return outcome

    def _extract_members(self, archive: zipfile.ZipFile, start_time: float) -> ExtractionOutcome:
        members = archive.infolist()
        extracted = 0
        errors = 0
        metadata = None
        store = MetadataStore(self.target_root)

        for info in members:
            relative_path = safe_member_path(info.filename)
            if relative_path is None:
                logger.warning(f"Skipping unsafe archive entry: {info.filename!r}")
                errors += 1
                continue

            target = self.target_root / relative_path
            if not is_within(self.target_root, target):
                logger.warning(f"Skipping archive entry outside target root: {info.filename!r}")
                errors += 1
                continue

            try:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                elif relative_path == METADATA_FILE:
                    carried = DeploymentMetadata.from_json(archive.read(info).decode("utf-8"))
                    store.write(carried)
                    metadata = carried
                else:
                    with archive.open(info) as source:
                        atomic_write_stream(source, target)
            except (OSError, ValueError, EOFError, NotImplementedError, RuntimeError,
                    zipfile.BadZipFile, zlib.error) as e:
                # RuntimeError covers encrypted members, NotImplementedError unsupported compression
                logger.error(f"Failed to extract {relative_path}: {e}")
                errors += 1
                continue

            extracted += 1

        deployment_type = metadata.deployment_type if metadata else DeploymentType.FULL.value

        if errors:
            message = f"Extracted {extracted} of {len(members)} entries with {errors} error(s)"
        else:
            message = f"Extracted {extracted} entries"
        logger.info(message)

        report = ExtractionReport(
            success=errors == 0,
            message=message,
            deployment_type=deployment_type,
            files_total=len(members),
            files_extracted=extracted,
            errors_count=errors,
            duration_seconds=round(time.time() - start_time, 3)
        )
        return ExtractionOutcome(report, metadata is not None, metadata)

    def _failed(self, message: str, start_time: float, package_found: bool = True) -> ExtractionOutcome:
        report = ExtractionReport(
            success=False,
            message=message,
            duration_seconds=round(time.time() - start_time, 3)
        )
        return ExtractionOutcome(report, package_found=package_found)

    def _discard(self, archive_path: Path) -> None:
        try:
            archive_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove package {archive_path}: {e}")
