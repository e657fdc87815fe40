"""Configuration loading service"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import ENV_CONFIG_PATH, PROJECT_CONFIG_FILE
from ..models.config import DeployerConfig, EnvironmentConfig

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
_PLACEHOLDER_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')


def expand_value(value: str) -> Optional[str]:
    """
    Expand environment placeholders in a configuration string

    A value consisting of a single unresolved placeholder becomes None, so
    an unset secret is treated as missing rather than as literal text.

    Args:
        value: Raw string from the configuration file

    Returns:
        Expanded string, or None
    """
    whole = _PLACEHOLDER_RE.fullmatch(value.strip())
    if whole:
        name, default = whole.groups()
        resolved = os.environ.get(name)
        if resolved is None:
            resolved = default
        return resolved

    def substitute(match: re.Match) -> str:
        name, default = match.groups()
        return os.environ.get(name, default if default is not None else '')

    return _PLACEHOLDER_RE.sub(substitute, value)


def expand_env(data: Any) -> Any:
    """Recursively expand placeholders in parsed YAML data"""
    if isinstance(data, dict):
        return {key: expand_env(item) for key, item in data.items()}
    if isinstance(data, list):
        return [expand_env(item) for item in data]
    if isinstance(data, str):
        return expand_value(data)
    return data


class ConfigService:
    """Service for locating and loading the deploy-sync configuration"""

    def __init__(self,
                 project_root: Union[str, Path, None] = None,
                 config_path: Union[str, Path, None] = None):
        """
        Args:
            project_root: Project root directory (defaults to cwd)
            config_path: Explicit configuration file
        """
        self.project_root = Path(project_root or Path.cwd()).resolve()
        self.config_path = self._locate(config_path)
        self._config: Optional[DeployerConfig] = None

    def _locate(self, config_path: Union[str, Path, None]) -> Path:
        if config_path:
            return Path(config_path)

        env_path = os.environ.get(ENV_CONFIG_PATH)
        if env_path:
            return Path(env_path)

        return self.project_root / PROJECT_CONFIG_FILE

    @property
    def config(self) -> DeployerConfig:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> DeployerConfig:
        """
        Load configuration from file

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file is missing or malformed
        """
        if not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e

        try:
            self._config = DeployerConfig.from_dict(expand_env(data or {}))
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e

        logger.debug(f"Loaded configuration from {self.config_path}")
        return self._config

    def get_environment(self, name: str) -> EnvironmentConfig:
        """
        Look up an environment

        Raises:
            ConfigError: If it is not configured
        """
        env_config = self.config.get_environment(name)
        if env_config is None:
            available = ", ".join(sorted(self.config.environments)) or "none"
            raise ConfigError(f"Environment '{name}' is not configured (available: {available})")
        return env_config


def load_config(config_path: Union[str, Path, None] = None,
                project_root: Union[str, Path, None] = None) -> DeployerConfig:
    """Load configuration from a file or the project default location"""
    return ConfigService(project_root, config_path).load_config()
