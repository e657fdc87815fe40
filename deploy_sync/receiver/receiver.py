"""Server-side deployment pipeline"""

import hmac
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from .command_runner import CommandRunner
from .deletion import delete_many
from .extractor import ArchiveExtractor
from ..api.exceptions import InvalidEnvironmentError, UnauthorizedError
from ..constants import DEFAULT_ZIP_NAME
from ..core.metadata_store import MetadataStore
from ..models.config import DeployerConfig, EnvironmentConfig
from ..models.metadata import DeploymentMetadata
from ..models.result import DeploymentResult

logger = logging.getLogger(__name__)


@dataclass
class RunRequest:
    """One authenticated call to the run endpoint"""
    env: str = "default"
    token: Optional[str] = None
    commands: Optional[List[str]] = None
    zipname: str = DEFAULT_ZIP_NAME
    delete: List[str] = field(default_factory=list)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class DeploymentReceiver:
    """Applies uploaded packages, reconciles deletions and runs commands"""

    def __init__(self,
                 config: DeployerConfig,
                 runner: CommandRunner,
                 target_root: Union[str, Path, None] = None):
        """
        Args:
            config: Deployer configuration (environments and tokens)
            runner: Backend executing post-deploy commands
            target_root: Directory deployments are applied to
        """
        self.config = config
        self.runner = runner
        self.target_root = Path(target_root or config.receiver.target_root).resolve()
        self.extractor = ArchiveExtractor(self.target_root)
        self.metadata_store = MetadataStore(self.target_root)

    def authenticate(self, env: str, token: Optional[str]) -> EnvironmentConfig:
        """
        Check the shared token of an environment

        Args:
            env: Environment name from the request
            token: Token from the request header

        Returns:
            The environment's configuration

        Raises:
            InvalidEnvironmentError: Unknown environment
            UnauthorizedError: Token not configured, missing or different
        """
        env_config = self.config.get_environment(env)
        if env_config is None:
            logger.warning(f"Rejected request for unknown environment {env!r}")
            raise InvalidEnvironmentError(env)

        expected = env_config.deploy_token
        if not expected or not token or not hmac.compare_digest(expected.encode(), token.encode()):
            logger.warning(f"Rejected request for {env!r}: invalid token")
            raise UnauthorizedError()

        return env_config

    def resolve_commands(self,
                         requested: Optional[List[str]],
                         env_config: EnvironmentConfig) -> List[str]:
        """Request list (even empty), else environment override, else defaults"""
        if requested is not None:
            return list(requested)
        if env_config.commands is not None:
            return list(env_config.commands)
        return list(self.config.default_commands)

    def run(self, request: RunRequest) -> DeploymentResult:
        """
        Authenticate and apply one run request

        Each step runs regardless of how the previous one went.

        Args:
            request: Run request

        Returns:
            DeploymentResult

        Raises:
            AuthError: If authentication fails; nothing is touched then
        """
        env_config = self.authenticate(request.env, request.token)
        start_time = time.time()
        started_at = _now()

        deletions = None
        if request.delete:
            logger.info(f"Deleting {len(request.delete)} requested path(s)")
            deletions = delete_many(self.target_root, request.delete)

        outcome = self.extractor.extract(request.zipname)

        auto_deletions = None
        if outcome.deleted_files:
            logger.info(f"Removing {len(outcome.deleted_files)} path(s) deleted since last deployment")
            auto_deletions = delete_many(self.target_root, outcome.deleted_files)

        commands = self.runner.execute_all(self.resolve_commands(request.commands, env_config))

        success = not (outcome.package_found and not outcome.report.success)

        return DeploymentResult(
            success=success,
            environment=request.env,
            extraction=outcome.report,
            started_at=started_at,
            completed_at=_now(),
            deletions=deletions,
            auto_deletions=auto_deletions,
            commands=commands,
            total_time=round(time.time() - start_time, 3)
        )

    def fetch_metadata(self, env: str, token: Optional[str]) -> Optional[DeploymentMetadata]:
        """Authenticate and return the last deployment record, if any"""
        self.authenticate(env, token)
        return self.metadata_store.read()
