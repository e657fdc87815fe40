"""Glob-based exclusion rules over relative paths"""

from fnmatch import fnmatchcase
from typing import Iterable, List

from ..constants import METADATA_FILE, LEGACY_METADATA_FILE


def _normalize_rule(rule: str) -> str:
    return rule.strip().strip("/")


def _normalize_path(relative_path: str) -> str:
    return relative_path.replace("\\", "/").strip("/")


def rule_matches(rule: str, relative_path: str) -> bool:
    """
    Check a single rule against a path

    The rule matches the path itself, anything below it, anything ending
    with it, or anything containing it as an inner segment, so a bare
    `logs` catches that name at any depth.

    Args:
        rule: Glob pattern
        relative_path: POSIX-style path relative to the tree root

    Returns:
        True if the rule matches
    """
    return (
        fnmatchcase(relative_path, rule)
        or fnmatchcase(relative_path, f"{rule}/*")
        or fnmatchcase(relative_path, f"*/{rule}")
        or fnmatchcase(relative_path, f"*/{rule}/*")
    )


def is_excluded(relative_path: str, rules: Iterable[str]) -> bool:
    """
    Check if a path is excluded by any rule

    Args:
        relative_path: Path relative to the tree root
        rules: Glob patterns

    Returns:
        True if excluded
    """
    path = _normalize_path(relative_path)
    return any(rule_matches(_normalize_rule(rule), path) for rule in rules if _normalize_rule(rule))


class PathFilter:
    """Exclusion test shared by the tree walker and the VCS diff"""

    def __init__(self, rules: Iterable[str] = ()):
        self.rules: List[str] = []
        for rule in rules:
            normalized = _normalize_rule(rule)
            if normalized and normalized not in self.rules:
                self.rules.append(normalized)

    @classmethod
    def for_tracking(cls, rules: Iterable[str], dependency_dir: str) -> 'PathFilter':
        """
        Build the filter used for change detection

        The dependency directory and the metadata document are shipped by
        their own rules, never through ordinary diffing.

        Args:
            rules: Configured exclude patterns
            dependency_dir: Dependency directory name (e.g. vendor)

        Returns:
            PathFilter instance
        """
        return cls([*rules, dependency_dir, METADATA_FILE, LEGACY_METADATA_FILE])

    def is_excluded(self, relative_path: str) -> bool:
        """Check if a path is excluded"""
        path = _normalize_path(relative_path)
        return any(rule_matches(rule, path) for rule in self.rules)

    def __contains__(self, relative_path: str) -> bool:
        return self.is_excluded(relative_path)

    def __repr__(self) -> str:
        return f"PathFilter({self.rules!r})"
