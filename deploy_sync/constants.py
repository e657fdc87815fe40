"""Global constants for deploy-sync"""

from enum import Enum

APP_NAME = "deploy-sync"
LOG_FORMAT = "%(message)s"

# Project identification
PROJECT_CONFIG_FILE = ".deploy-sync.yaml"

# Deployment metadata
METADATA_FILE = ".deploy-meta.json"
LEGACY_METADATA_FILE = "deploy-meta.json"

# Package defaults
DEFAULT_ZIP_NAME = "deploy.zip"
SKIP_DEPLOYMENT_ZIP_NAME = "skip-deployment.zip"
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB
HASH_CHUNK_SIZE = 8192

# Dependency tracking
DEFAULT_DEPENDENCY_DIR = "vendor"
DEFAULT_DEPENDENCY_MANIFEST = "composer.json"
DEFAULT_DEPENDENCY_LOCK = "composer.lock"

# Directories shipped verbatim (empty ones included) on first deployment
DEFAULT_BOOTSTRAP_DIRS = [
    "storage",
    "bootstrap/cache",
]

# Directories never descended into while walking the local tree
WALK_SKIP_DIRS = {".git", "node_modules"}

# Basenames the receiver refuses to delete
PROTECTED_BASENAMES = frozenset({
    ".env",
    "artisan",
    "composer.json",
    "composer.lock",
})

# Common exclude patterns
DEFAULT_EXCLUDE_PATTERNS = [
    ".git",
    ".env",
    ".env.*",
    "node_modules",
    "tests",
    "storage/logs",
    "storage/framework/cache",
    "storage/framework/sessions",
    "storage/framework/views",
    "*.log",
    "*.map",
    ".DS_Store",
    "Thumbs.db",
    ".idea",
    ".vscode",
    "public/hot",
]

# Remote commands
DEFAULT_COMMANDS = [
    "migrate --force",
    "config:clear",
    "cache:clear",
    "config:cache",
    "up",
]
DEFAULT_COMMAND_PREFIX = ["php", "artisan"]
DEFAULT_COMMAND_TIMEOUT = 300
COMMAND_OUTPUT_LIMIT = 500
TRUNCATION_MARKER = "... (truncated)"

# HTTP API
TOKEN_HEADER = "X-DEPLOY-TOKEN"
RUN_ENDPOINT = "/deployer/run"
METADATA_ENDPOINT = "/deployer/metadata"
RUN_TIMEOUT = 300.0
METADATA_TIMEOUT = 30.0

# Remote logs
LOGS_DIR = "storage/logs"
DEFAULT_LOG_FILE = "laravel.log"
DEFAULT_TAIL_LINES = 100
TAIL_BYTES_PER_LINE = 300
LOG_POLL_INTERVAL = 3.0
LARGE_LOG_WARNING_SIZE = 5 * 1024 * 1024


class ChangeMethod(Enum):
    """Change detection strategies"""
    FULL = "full"
    VCS_DIFF = "vcs-diff"
    HASH_DIFF = "hash-diff"


class DeploymentType(Enum):
    """Deployment type recorded in metadata"""
    FULL = "full"
    INCREMENTAL = "incremental"


class TransportType(Enum):
    """Supported transport backends"""
    FTP = "ftp"
    FILESYSTEM = "filesystem"


# Error codes
class ErrorCode:
    CONFIG_FORMAT_ERROR = "DS001"
    INVALID_ENVIRONMENT = "DS002"
    UNAUTHORIZED = "DS003"
    TRANSPORT_FAILED = "DS004"
    PACK_FAILED = "DS005"
    ARCHIVE_FAILED = "DS006"
    PATH_UNSAFE = "DS007"
    COMMAND_FAILED = "DS008"
    REMOTE_ERROR = "DS009"
    MISSING_REQUIRED_PARAMETER = "DS010"


# Environment variables
ENV_CONFIG_PATH = "DEPLOY_SYNC_CONFIG"

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ROCKET = "🚀"
EMOJI_PACKAGE = "📦"
