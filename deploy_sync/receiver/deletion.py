"""Safe removal of paths below the target root"""

import logging
import re
from pathlib import Path
from typing import Iterable, Union

from ..api.exceptions import PathSafetyError
from ..constants import PROTECTED_BASENAMES
from ..models.result import DeleteReport, FailedPath, SkippedPath
from ..utils.file_utils import is_within, remove_path

logger = logging.getLogger(__name__)

INVALID_PATH = "invalid path"
PROTECTED = "protected"
NOT_FOUND = "not found"

_SEPARATORS = re.compile(r'[\\/]+')


def sanitize_relative_path(path: str) -> str:
    """
    Validate a caller-supplied deletion path

    Leading separators are stripped. Paths with a parent traversal
    segment, empty paths and protected basenames are refused.

    Args:
        path: Path relative to the target root

    Returns:
        Normalized POSIX-style relative path

    Raises:
        PathSafetyError: If the path must not be deleted
    """
    segments = [s for s in _SEPARATORS.split((path or '').strip()) if s not in ('', '.')]

    if not segments or '..' in segments:
        raise PathSafetyError(path, INVALID_PATH)

    if segments[-1] in PROTECTED_BASENAMES:
        raise PathSafetyError(path, PROTECTED)

    return '/'.join(segments)


def delete_many(root: Union[str, Path], paths: Iterable[str]) -> DeleteReport:
    """
    Remove files and directories below root

    Args:
        root: Target root directory
        paths: Relative paths to remove

    Returns:
        DeleteReport; refusals go to skipped, removal errors to failed
    """
    root = Path(root).resolve()
    report = DeleteReport()

    for raw in paths:
        try:
            relative_path = sanitize_relative_path(raw)
        except PathSafetyError as e:
            logger.warning(f"Refusing to delete {raw!r}: {e.reason}")
            report.skipped.append(SkippedPath(raw, e.reason))
            continue

        target = root / relative_path

        if not is_within(root, target):
            logger.warning(f"Refusing to delete {raw!r}: outside target root")
            report.skipped.append(SkippedPath(raw, INVALID_PATH))
            continue

        if not target.exists() and not target.is_symlink():
            report.skipped.append(SkippedPath(raw, NOT_FOUND))
            continue

        try:
            removed_tree = remove_path(target)
        except OSError as e:
            logger.error(f"Failed to delete {relative_path}: {e}")
            report.failed.append(FailedPath(relative_path, str(e)))
            continue

        report.deleted.append(f"{relative_path}/" if removed_tree else relative_path)

    if report.deleted or report.failed:
        logger.info(f"{report.message}, {len(report.failed)} failed, {len(report.skipped)} skipped")

    return report
