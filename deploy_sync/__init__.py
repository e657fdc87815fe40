"""deploy-sync - Incremental deployments for web applications.

Detects which files changed since the last deployment, ships them in a
zip package together with deployment metadata, and lets a receiver on
the server apply the package, remove deleted files and run post-deploy
commands.
"""

from .__version__ import __version__, __version_info__, __license__

# Services
from .services.config_service import ConfigService, load_config
from .services.deploy_service import DeployOptions, DeployService
from .services.logs_service import LogsService
from .services.remote_service import RemoteCommandService

# Client and receiver
from .api.client import DeployerApiClient
from .receiver.receiver import DeploymentReceiver, RunRequest
from .receiver.app import create_app

# Data models
from .models.changeset import ChangeSet
from .models.metadata import DeploymentMetadata
from .models.result import DeployReport, DeploymentResult, PackResult
from .models.config import DeployerConfig, EnvironmentConfig

# Exceptions
from .api.exceptions import (
    DeploySyncError,
    AuthError,
    ConfigError,
    PackError,
    PathSafetyError,
    RemoteError,
    TransportError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__license__",

    # Services
    "ConfigService",
    "load_config",
    "DeployOptions",
    "DeployService",
    "LogsService",
    "RemoteCommandService",

    # Client and receiver
    "DeployerApiClient",
    "DeploymentReceiver",
    "RunRequest",
    "create_app",

    # Data models
    "ChangeSet",
    "DeploymentMetadata",
    "DeployReport",
    "DeploymentResult",
    "PackResult",
    "DeployerConfig",
    "EnvironmentConfig",

    # Exceptions
    "DeploySyncError",
    "AuthError",
    "ConfigError",
    "PackError",
    "PathSafetyError",
    "RemoteError",
    "TransportError",
]
