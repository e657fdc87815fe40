"""Public API: receiver client and exceptions"""

from .client import DeployerApiClient
from .exceptions import (
    DeploySyncError,
    ConfigError,
    AuthError,
    InvalidEnvironmentError,
    UnauthorizedError,
    PackError,
    ArchiveError,
    PathSafetyError,
    CommandExecutionError,
    TransportError,
    RemoteError,
    RemoteFileNotFoundError,
)

__all__ = [
    'DeployerApiClient',
    'DeploySyncError',
    'ConfigError',
    'AuthError',
    'InvalidEnvironmentError',
    'UnauthorizedError',
    'PackError',
    'ArchiveError',
    'PathSafetyError',
    'CommandExecutionError',
    'TransportError',
    'RemoteError',
    'RemoteFileNotFoundError',
]
