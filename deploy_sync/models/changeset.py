"""Change set model"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Any

from ..constants import ChangeMethod


@dataclass
class ChangeSet:
    """Files added, modified and deleted since the last deployment

    The three path sets are kept disjoint: a path reported as added wins
    over modified, and either wins over deleted.
    """

    method: ChangeMethod
    added: Set[str] = field(default_factory=set)
    modified: Set[str] = field(default_factory=set)
    deleted: Set[str] = field(default_factory=set)
    include_vendor: bool = False
    include_bootstrap: bool = False
    is_first_deployment: bool = False
    current_hashes: Optional[Dict[str, str]] = None
    vcs_available: bool = False
    vcs_commit: Optional[str] = None
    vcs_previous_commit: Optional[str] = None

    def __post_init__(self):
        self.added = set(self.added)
        self.modified = set(self.modified) - self.added
        self.deleted = set(self.deleted) - self.added - self.modified

    @property
    def files_to_package(self) -> list:
        """Sorted paths whose current content must be shipped"""
        return sorted(self.added | self.modified)

    @property
    def is_empty(self) -> bool:
        """Check if nothing changed"""
        return not (self.added or self.modified or self.deleted)

    def summary(self) -> Dict[str, Any]:
        """Counts for display and reporting"""
        return {
            "method": self.method.value,
            "added": len(self.added),
            "modified": len(self.modified),
            "deleted": len(self.deleted),
            "include_vendor": self.include_vendor,
            "include_bootstrap": self.include_bootstrap,
            "vcs_available": self.vcs_available,
        }
