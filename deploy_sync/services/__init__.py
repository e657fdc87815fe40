"""Client-side services"""

from .config_service import ConfigService, load_config
from .deploy_service import DeployOptions, DeployService
from .logs_service import LogsService
from .remote_service import RemoteCommandService

__all__ = [
    'ConfigService',
    'load_config',
    'DeployOptions',
    'DeployService',
    'LogsService',
    'RemoteCommandService',
]
