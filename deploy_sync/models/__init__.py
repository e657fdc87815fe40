# deploy_sync/models/__init__.py
"""Data models for deploy-sync"""

from .changeset import ChangeSet
from .metadata import DeploymentMetadata, VcsInfo, DependencyInfo
from .result import (
    CommandResult,
    DeleteReport,
    DeploymentResult,
    DeployReport,
    ExtractionReport,
    FailedPath,
    PackResult,
    SkippedPath,
)
from .config import (
    DeployerConfig,
    DependencyConfig,
    EnvironmentConfig,
    IncrementalConfig,
    ReceiverSettings,
    TransportConfig,
)

__all__ = [
    # Change detection
    "ChangeSet",

    # Metadata models
    "DeploymentMetadata",
    "VcsInfo",
    "DependencyInfo",

    # Result models
    "CommandResult",
    "DeleteReport",
    "DeploymentResult",
    "DeployReport",
    "ExtractionReport",
    "FailedPath",
    "PackResult",
    "SkippedPath",

    # Config models
    "DeployerConfig",
    "DependencyConfig",
    "EnvironmentConfig",
    "IncrementalConfig",
    "ReceiverSettings",
    "TransportConfig",
]
