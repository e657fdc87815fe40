"""Git operation utilities"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NameStatusEntry:
    """One line of `git diff --name-status`"""
    status: str
    path: str
    new_path: Optional[str] = None

    @property
    def kind(self) -> str:
        """Single-letter change kind (A, M, D, R, C, T, ...)"""
        return self.status[:1].upper()


def _run_git(path: Path, *args: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ['git', *args],
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        logger.debug(f"git {' '.join(args)} failed: {e}")
        return None


def is_git_repository(path: Path) -> bool:
    """
    Check if directory is inside a Git work tree

    Args:
        path: Directory path

    Returns:
        True if it's a Git repository
    """
    output = _run_git(path, 'rev-parse', '--is-inside-work-tree')
    return output is not None and output.strip() == 'true'


def get_current_branch(path: Path) -> Optional[str]:
    """
    Get current Git branch

    Args:
        path: Repository path

    Returns:
        Branch name or None
    """
    output = _run_git(path, 'rev-parse', '--abbrev-ref', 'HEAD')
    return output.strip() if output else None


def get_head_commit(path: Path) -> Optional[str]:
    """
    Get the full hash of HEAD

    Args:
        path: Repository path

    Returns:
        Commit hash or None
    """
    output = _run_git(path, 'rev-parse', 'HEAD')
    return output.strip() if output else None


def parse_name_status(output: str) -> List[NameStatusEntry]:
    """
    Parse NUL-separated `git diff --name-status -z` output

    Renames and copies carry two paths (old, new); every other status
    carries one.

    Args:
        output: Raw command output

    Returns:
        Parsed entries in diff order
    """
    tokens = [t for t in output.split('\0') if t != '']
    entries = []
    i = 0

    while i < len(tokens):
        status = tokens[i].strip()
        if status[:1] in ('R', 'C'):
            if i + 2 >= len(tokens):
                break
            entries.append(NameStatusEntry(status, tokens[i + 1], tokens[i + 2]))
            i += 3
        else:
            if i + 1 >= len(tokens):
                break
            entries.append(NameStatusEntry(status, tokens[i + 1]))
            i += 2

    return entries


def diff_name_status(path: Path, from_commit: str, to_commit: str) -> Optional[List[NameStatusEntry]]:
    """
    List changes between two commits

    Args:
        path: Project directory; paths are reported relative to it
        from_commit: Base commit
        to_commit: Target commit

    Returns:
        Parsed entries, or None if git failed (e.g. unknown commit)
    """
    output = _run_git(path, 'diff', '--name-status', '-z', '-M', '--relative', from_commit, to_commit)
    if output is None:
        return None
    return parse_name_status(output)


class GitRepository:
    """Version control access for the change resolver"""

    def __init__(self, path: Path, enabled: bool = True):
        """
        Args:
            path: Repository path
            enabled: Whether git-based diffing is allowed by configuration
        """
        self.path = Path(path)
        self.enabled = enabled
        self._available: Optional[bool] = None

    def is_available(self) -> bool:
        """Check if git is usable and enabled"""
        if self._available is None:
            self._available = is_git_repository(self.path)
        return self.enabled and self._available

    def branch(self) -> Optional[str]:
        return get_current_branch(self.path)

    def head_commit(self) -> Optional[str]:
        return get_head_commit(self.path)

    def diff(self, from_commit: str, to_commit: str) -> Optional[List[NameStatusEntry]]:
        return diff_name_status(self.path, from_commit, to_commit)
