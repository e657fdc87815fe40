"""Configuration data models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from ..constants import (
    TransportType,
    DEFAULT_BOOTSTRAP_DIRS,
    DEFAULT_COMMANDS,
    DEFAULT_COMMAND_PREFIX,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_DEPENDENCY_DIR,
    DEFAULT_DEPENDENCY_LOCK,
    DEFAULT_DEPENDENCY_MANIFEST,
    DEFAULT_EXCLUDE_PATTERNS,
)


def _optional_list(value: Any, field_name: str) -> Optional[List[str]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be a list")
    return [str(item) for item in value]


@dataclass
class TransportConfig:
    """Configuration for the file transport of an environment"""

    type: str = TransportType.FTP.value
    host: Optional[str] = None
    port: int = 21
    username: Optional[str] = None
    password: Optional[str] = None
    path: str = ""
    passive: bool = True
    timeout: float = 60.0

    def __post_init__(self):
        """Validate transport configuration"""
        transport_type = TransportType(self.type)

        if transport_type == TransportType.FTP:
            if not self.host:
                raise ValueError("FTP transport requires 'host'")
        elif transport_type == TransportType.FILESYSTEM:
            if not self.path:
                raise ValueError("Filesystem transport requires 'path'")

    @property
    def transport_type(self) -> TransportType:
        """Get TransportType enum"""
        return TransportType(self.type)

    def get_display_info(self) -> str:
        """Get display information for the transport"""
        if self.transport_type == TransportType.FTP:
            return f"FTP: {self.host}:{self.port}/{self.path.strip('/')}"
        return f"Filesystem: {self.path}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "type": self.type,
            "path": self.path
        }

        if self.transport_type == TransportType.FTP:
            data.update({
                "host": self.host,
                "port": self.port,
                "username": self.username,
                "password": self.password,
                "passive": self.passive,
                "timeout": self.timeout
            })

        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransportConfig':
        """Create from dictionary"""
        return cls(
            type=data.get("type", TransportType.FTP.value),
            host=data.get("host"),
            port=int(data.get("port") or 21),
            username=data.get("username"),
            password=data.get("password"),
            path=data.get("path") or "",
            passive=data.get("passive", True),
            timeout=float(data.get("timeout") or 60.0)
        )


@dataclass
class EnvironmentConfig:
    """Settings of one deployment environment"""

    name: str
    remote_base_url: Optional[str] = None
    deploy_token: Optional[str] = None
    branch: str = "main"
    commands: Optional[List[str]] = None
    transport: Optional[TransportConfig] = None

    def validate_client(self) -> List[str]:
        """List problems that prevent deploying to this environment"""
        issues = []
        if not self.remote_base_url:
            issues.append(f"remote_base_url missing for {self.name}")
        if not self.deploy_token:
            issues.append(f"deploy_token missing for {self.name}")
        return issues

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "remote_base_url": self.remote_base_url,
            "deploy_token": self.deploy_token,
            "branch": self.branch,
            "commands": self.commands
        }

        if self.transport:
            data["transport"] = self.transport.to_dict()

        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'EnvironmentConfig':
        """Create from dictionary"""
        transport = data.get("transport")

        return cls(
            name=name,
            remote_base_url=data.get("remote_base_url"),
            deploy_token=data.get("deploy_token"),
            branch=data.get("branch") or "main",
            commands=_optional_list(data.get("commands"), f"environments.{name}.commands"),
            transport=TransportConfig.from_dict(transport) if transport else None
        )


@dataclass
class IncrementalConfig:
    """Incremental deployment switches"""

    enabled: bool = True
    git_enabled: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IncrementalConfig':
        """Create from dictionary"""
        return cls(
            enabled=bool(data.get("enabled", True)),
            git_enabled=bool(data.get("git_enabled", False))
        )


@dataclass
class DependencyConfig:
    """Where third-party dependencies live and how they are fingerprinted"""

    directory: str = DEFAULT_DEPENDENCY_DIR
    manifest: str = DEFAULT_DEPENDENCY_MANIFEST
    lock: str = DEFAULT_DEPENDENCY_LOCK

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DependencyConfig':
        """Create from dictionary"""
        return cls(
            directory=(data.get("directory") or DEFAULT_DEPENDENCY_DIR).strip("/"),
            manifest=data.get("manifest") or DEFAULT_DEPENDENCY_MANIFEST,
            lock=data.get("lock") or DEFAULT_DEPENDENCY_LOCK
        )


@dataclass
class ReceiverSettings:
    """Server-side settings"""

    target_root: str = "."
    command_prefix: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND_PREFIX))
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReceiverSettings':
        """Create from dictionary"""
        prefix = data.get("command_prefix", DEFAULT_COMMAND_PREFIX)
        if isinstance(prefix, str):
            prefix = prefix.split()

        return cls(
            target_root=data.get("target_root") or ".",
            command_prefix=list(prefix),
            command_timeout=int(data.get("command_timeout") or DEFAULT_COMMAND_TIMEOUT)
        )


@dataclass
class DeployerConfig:
    """Complete deploy-sync configuration"""

    environments: Dict[str, EnvironmentConfig] = field(default_factory=dict)
    default_commands: List[str] = field(default_factory=lambda: list(DEFAULT_COMMANDS))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    incremental: IncrementalConfig = field(default_factory=IncrementalConfig)
    dependencies: DependencyConfig = field(default_factory=DependencyConfig)
    bootstrap_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_BOOTSTRAP_DIRS))
    receiver: ReceiverSettings = field(default_factory=ReceiverSettings)

    def get_environment(self, name: str) -> Optional[EnvironmentConfig]:
        """Look up an environment by name"""
        return self.environments.get(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeployerConfig':
        """Create from dictionary"""
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")

        environments = {}
        for name, env_data in (data.get("environments") or {}).items():
            if not isinstance(env_data, dict):
                raise ValueError(f"Environment '{name}' must be a mapping")
            environments[name] = EnvironmentConfig.from_dict(name, env_data)

        default_commands = data.get("default_commands")
        exclude = data.get("exclude")
        bootstrap_dirs = data.get("bootstrap_dirs")

        return cls(
            environments=environments,
            default_commands=_optional_list(default_commands, "default_commands")
            if default_commands is not None else list(DEFAULT_COMMANDS),
            exclude=_optional_list(exclude, "exclude")
            if exclude is not None else list(DEFAULT_EXCLUDE_PATTERNS),
            incremental=IncrementalConfig.from_dict(data.get("incremental") or {}),
            dependencies=DependencyConfig.from_dict(data.get("dependencies") or {}),
            bootstrap_dirs=_optional_list(bootstrap_dirs, "bootstrap_dirs")
            if bootstrap_dirs is not None else list(DEFAULT_BOOTSTRAP_DIRS),
            receiver=ReceiverSettings.from_dict(data.get("receiver") or {})
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "default_commands": self.default_commands,
            "environments": {
                name: env.to_dict() for name, env in self.environments.items()
            },
            "exclude": self.exclude,
            "incremental": {
                "enabled": self.incremental.enabled,
                "git_enabled": self.incremental.git_enabled
            },
            "dependencies": {
                "directory": self.dependencies.directory,
                "manifest": self.dependencies.manifest,
                "lock": self.dependencies.lock
            },
            "bootstrap_dirs": self.bootstrap_dirs,
            "receiver": {
                "target_root": self.receiver.target_root,
                "command_prefix": self.receiver.command_prefix,
                "command_timeout": self.receiver.command_timeout
            }
        }
