"""Operation result models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any

from .metadata import DeploymentMetadata


@dataclass
class SkippedPath:
    """Deletion request that was refused"""
    path: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {"path": self.path, "reason": self.reason}

    def __str__(self) -> str:
        return f"{self.path} ({self.reason})"


@dataclass
class FailedPath:
    """Deletion that raised while removing"""
    path: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {"path": self.path, "error": self.error}

    def __str__(self) -> str:
        return f"{self.path} ({self.error})"


@dataclass
class DeleteReport:
    """Outcome of a batch deletion"""

    deleted: List[str] = field(default_factory=list)
    failed: List[FailedPath] = field(default_factory=list)
    skipped: List[SkippedPath] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """A batch succeeds when nothing raised; skips do not count"""
        return not self.failed

    @property
    def message(self) -> str:
        return f"Deleted {len(self.deleted)} item(s)"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "deleted": list(self.deleted),
            "failed": [f.to_dict() for f in self.failed],
            "skipped": [s.to_dict() for s in self.skipped],
            "message": self.message
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeleteReport':
        """Create from dictionary"""
        return cls(
            deleted=list(data.get("deleted", [])),
            failed=[FailedPath(**f) for f in data.get("failed", [])],
            skipped=[SkippedPath(**s) for s in data.get("skipped", [])]
        )


@dataclass
class ExtractionReport:
    """Outcome of applying an uploaded package"""

    success: bool
    message: str
    deployment_type: Optional[str] = None
    files_total: int = 0
    files_extracted: int = 0
    errors_count: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "message": self.message,
            "deployment_type": self.deployment_type,
            "files_total": self.files_total,
            "files_extracted": self.files_extracted,
            "errors_count": self.errors_count,
            "duration_seconds": self.duration_seconds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionReport':
        """Create from dictionary"""
        return cls(
            success=bool(data.get("success", False)),
            message=data.get("message", ""),
            deployment_type=data.get("deployment_type"),
            files_total=data.get("files_total", 0),
            files_extracted=data.get("files_extracted", 0),
            errors_count=data.get("errors_count", 0),
            duration_seconds=data.get("duration_seconds", 0.0)
        )


@dataclass
class CommandResult:
    """Outcome of a single remote command"""

    command: str
    success: bool = True
    output: str = ""
    error: Optional[str] = None
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "command": self.command,
            "success": self.success,
            "output": self.output,
            "error": self.error,
            "duration_ms": self.duration_ms
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommandResult':
        """Create from dictionary"""
        return cls(
            command=data.get("command", ""),
            success=bool(data.get("success", False)),
            output=data.get("output") or "",
            error=data.get("error"),
            duration_ms=data.get("duration_ms", 0)
        )


@dataclass
class DeploymentResult:
    """Receiver response for a run request"""

    success: bool
    environment: str
    extraction: ExtractionReport
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    deletions: Optional[DeleteReport] = None
    auto_deletions: Optional[DeleteReport] = None
    commands: List[CommandResult] = field(default_factory=list)
    total_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "environment": self.environment,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "deletions": self.deletions.to_dict() if self.deletions else None,
            "auto_deletions": self.auto_deletions.to_dict() if self.auto_deletions else None,
            "extraction": self.extraction.to_dict(),
            "commands": [c.to_dict() for c in self.commands],
            "total_time": self.total_time
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeploymentResult':
        """Create from dictionary"""
        deletions = data.get("deletions")
        auto_deletions = data.get("auto_deletions")
        extraction = data.get("extraction") or {"success": False, "message": "No extraction report"}

        return cls(
            success=bool(data.get("success", False)),
            environment=data.get("environment", "default"),
            extraction=ExtractionReport.from_dict(extraction),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
            deletions=DeleteReport.from_dict(deletions) if deletions else None,
            auto_deletions=DeleteReport.from_dict(auto_deletions) if auto_deletions else None,
            commands=[CommandResult.from_dict(c) for c in data.get("commands", [])],
            total_time=data.get("total_time", 0.0)
        )


@dataclass
class PackResult:
    """Result of building a deployment package"""

    archive_path: Path
    metadata: DeploymentMetadata
    files_added: int = 0
    files_skipped: List[str] = field(default_factory=list)
    archive_size: int = 0
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "archive_path": str(self.archive_path),
            "files_added": self.files_added,
            "files_skipped": list(self.files_skipped),
            "archive_size": self.archive_size,
            "deployment_type": self.metadata.deployment_type,
            "duration": self.duration
        }


@dataclass
class DeployReport:
    """Client-side outcome of a complete deployment"""

    environment: str
    success: bool = False
    changes: Optional[Dict[str, Any]] = None
    pack: Optional[PackResult] = None
    remote: Optional[DeploymentResult] = None
    commands: List[CommandResult] = field(default_factory=list)
    uploaded: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None
    duration: float = 0.0

    @property
    def failed_commands(self) -> List[CommandResult]:
        return [c for c in self.commands if not c.success]

    def fail(self, message: str, error_code: Optional[str] = None) -> 'DeployReport':
        """Mark the deployment as failed"""
        self.success = False
        self.error = message
        self.error_code = error_code
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "environment": self.environment,
            "success": self.success,
            "changes": self.changes,
            "pack": self.pack.to_dict() if self.pack else None,
            "remote": self.remote.to_dict() if self.remote else None,
            "commands": [c.to_dict() for c in self.commands],
            "uploaded": self.uploaded,
            "error": self.error,
            "error_code": self.error_code,
            "duration": self.duration
        }
