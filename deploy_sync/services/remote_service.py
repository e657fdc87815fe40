"""Running receiver commands without deploying"""

import logging
from typing import Callable, List, Optional

from ..api.client import DeployerApiClient
from ..api.exceptions import ConfigError, TransportError, RemoteError
from ..constants import SKIP_DEPLOYMENT_ZIP_NAME, ErrorCode
from ..models.config import EnvironmentConfig
from ..models.result import CommandResult

logger = logging.getLogger(__name__)


class RemoteCommandService:
    """Runs commands on an environment one request at a time"""

    def __init__(self,
                 env_config: EnvironmentConfig,
                 api_client: Optional[DeployerApiClient] = None):
        self.env_config = env_config
        self.api_client = api_client or DeployerApiClient(env_config)

    async def run_one(self, command: str) -> CommandResult:
        """
        Run one command; transport and receiver failures become a failed result

        Args:
            command: Command line

        Returns:
            CommandResult
        """
        try:
            remote = await self.api_client.run(commands=[command], zipname=SKIP_DEPLOYMENT_ZIP_NAME)
        except (TransportError, RemoteError) as e:
            logger.error(f"Command '{command}' could not be run: {e}")
            return CommandResult(command=command, success=False, error=str(e))

        if not remote.commands:
            return CommandResult(command=command, success=False, error="Receiver returned no command result")
        return remote.commands[0]

    async def run(self,
                  commands: List[str],
                  on_command: Optional[Callable[[CommandResult], None]] = None) -> List[CommandResult]:
        """
        Run commands in order

        Args:
            commands: Command lines
            on_command: Called with each result as it completes

        Returns:
            Results in command order

        Raises:
            ConfigError: If no command was given
            AuthError: If the receiver rejects the environment or token
        """
        if not commands:
            raise ConfigError("No commands specified")

        results = []
        try:
            for command in commands:
                result = await self.run_one(command)
                results.append(result)
                if on_command:
                    on_command(result)
        finally:
            await self.api_client.close()

        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning(f"{failed} of {len(results)} command(s) failed ({ErrorCode.COMMAND_FAILED})")
        return results
