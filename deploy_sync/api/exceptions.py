"""Exception definitions for deploy-sync"""

from ..constants import ErrorCode


class DeploySyncError(Exception):
    """Base exception for deploy-sync"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(DeploySyncError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_FORMAT_ERROR)


class AuthError(DeploySyncError):
    """Authentication error"""

    status_code = 401


class InvalidEnvironmentError(AuthError):
    """Requested environment is not configured"""

    status_code = 400

    def __init__(self, environment: str):
        super().__init__(f"Invalid environment: {environment}", ErrorCode.INVALID_ENVIRONMENT)
        self.environment = environment


class UnauthorizedError(AuthError):
    """Missing or mismatched deploy token"""

    def __init__(self, message: str = "Unauthorized - Invalid token"):
        super().__init__(message, ErrorCode.UNAUTHORIZED)


class PackError(DeploySyncError):
    """Packing operation error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PACK_FAILED)


class ArchiveError(DeploySyncError):
    """Package missing, unreadable or not extractable"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.ARCHIVE_FAILED)


class PathSafetyError(DeploySyncError):
    """Path escapes the target root or names a protected file"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path} ({reason})", ErrorCode.PATH_UNSAFE)
        self.path = path
        self.reason = reason


class CommandExecutionError(DeploySyncError):
    """Remote command failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.COMMAND_FAILED)


class TransportError(DeploySyncError):
    """Connection, timeout or transfer failure"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TRANSPORT_FAILED)


class RemoteError(DeploySyncError):
    """Receiver answered with an unexpected status or body"""

    def __init__(self, message: str, status_code: int = None, raw: str = None):
        super().__init__(message, ErrorCode.REMOTE_ERROR)
        self.status_code = status_code
        self.raw = raw


class RemoteFileNotFoundError(TransportError):
    """Remote file is missing or empty"""

    def __init__(self, path: str):
        super().__init__(f"Remote file not found or empty: {path}")
        self.path = path
