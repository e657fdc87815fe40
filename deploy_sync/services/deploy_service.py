"""Deploy service: detect, pack, upload and apply a deployment"""

import logging
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..api.client import DeployerApiClient
from ..api.exceptions import AuthError, DeploySyncError, PackError, RemoteError, TransportError
from ..constants import DEFAULT_ZIP_NAME, ErrorCode
from ..core.change_resolver import ChangeSetResolver
from ..core.local_tree import LocalTree
from ..core.package_builder import PackageBuilder, ProgressCallback
from ..core.path_filter import PathFilter
from ..models.changeset import ChangeSet
from ..models.config import DeployerConfig, EnvironmentConfig
from ..models.metadata import DeploymentMetadata
from ..models.result import CommandResult, DeployReport
from ..transport.base import Transport
from ..transport.factory import create_transport
from ..utils.file_utils import is_plain_filename
from ..utils.git_utils import GitRepository

logger = logging.getLogger(__name__)

CommandCallback = Callable[[CommandResult], None]


@dataclass
class DeployOptions:
    """Switches of one deploy invocation"""
    full: bool = False
    init: bool = False
    skip_upload: bool = False
    dry_run: bool = False
    zipname: str = DEFAULT_ZIP_NAME
    delete: List[str] = field(default_factory=list)
    output_dir: Optional[Path] = None


class DeployService:
    """Runs one deployment of the project to an environment

    The API client and transport are opened once and reused for the
    metadata fetch, the upload and every run call, then closed.
    """

    def __init__(self,
                 config: DeployerConfig,
                 env_config: EnvironmentConfig,
                 project_root: Union[str, Path],
                 api_client: Optional[DeployerApiClient] = None,
                 transport: Optional[Transport] = None,
                 vcs: Optional[GitRepository] = None):
        """
        Args:
            config: Deployer configuration
            env_config: Target environment
            project_root: Local tree to deploy
            api_client: Receiver client (built from env_config if omitted)
            transport: File transport (built from env_config if omitted)
            vcs: Version control access (git in project_root if omitted)
        """
        self.config = config
        self.env_config = env_config
        self.project_root = Path(project_root).resolve()
        self._api_client = api_client
        self._transport = transport

        path_filter = PathFilter.for_tracking(config.exclude, config.dependencies.directory)
        self.tree = LocalTree(self.project_root, path_filter)
        self.vcs = vcs or GitRepository(self.project_root, enabled=config.incremental.git_enabled)
        self.resolver = ChangeSetResolver(self.tree, self.vcs, config.dependencies)
        self.builder = PackageBuilder(self.tree, config.dependencies, config.bootstrap_dirs, self.vcs)

    @property
    def api_client(self) -> DeployerApiClient:
        if self._api_client is None:
            self._api_client = DeployerApiClient(self.env_config)
        return self._api_client

    @property
    def transport(self) -> Optional[Transport]:
        if self._transport is None and self.env_config.transport is not None:
            self._transport = create_transport(self.env_config.transport)
        return self._transport

    @property
    def commands(self) -> List[str]:
        """Environment override, else the global default list"""
        if self.env_config.commands is not None:
            return list(self.env_config.commands)
        return list(self.config.default_commands)

    async def fetch_previous(self, options: DeployOptions) -> Optional[DeploymentMetadata]:
        """Last deployment record, or None when a full deployment is wanted"""
        if options.full or options.init:
            logger.info("Forcing full deployment")
            return None

        if not self.config.incremental.enabled:
            logger.info("Incremental deployment disabled in configuration")
            return None

        return await self.api_client.fetch_metadata()

    def detect_changes(self,
                       previous: Optional[DeploymentMetadata],
                       options: DeployOptions) -> ChangeSet:
        return self.resolver.resolve(previous, bootstrap=options.init)

    async def deploy(self,
                     options: Optional[DeployOptions] = None,
                     on_command: Optional[CommandCallback] = None,
                     on_progress: Optional[ProgressCallback] = None) -> DeployReport:
        """
        Deploy the project

        Args:
            options: Deploy switches
            on_command: Called with each command result as it completes
            on_progress: Packaging progress callback (done, total)

        Returns:
            DeployReport

        Raises:
            AuthError: If the receiver rejects the environment or token
        """
        options = options or DeployOptions()
        report = DeployReport(environment=self.env_config.name)
        start_time = time.time()
        work_dir = Path(tempfile.mkdtemp(prefix="deploy-sync-"))

        try:
            await self._deploy(options, report, work_dir, on_command, on_progress)
        except AuthError:
            raise
        except DeploySyncError as e:
            logger.error(f"Deployment failed: {e}")
            report.fail(str(e), e.error_code)
        finally:
            await self._close()
            shutil.rmtree(work_dir, ignore_errors=True)
            report.duration = round(time.time() - start_time, 2)

        return report

    async def _deploy(self,
                      options: DeployOptions,
                      report: DeployReport,
                      work_dir: Path,
                      on_command: Optional[CommandCallback],
                      on_progress: Optional[ProgressCallback]) -> None:
        if not is_plain_filename(options.zipname):
            raise PackError(f"Package name must be a plain file name: {options.zipname}")

        previous = await self.fetch_previous(options)
        changeset = self.detect_changes(previous, options)
        report.changes = changeset.summary()

        if options.dry_run:
            logger.info("Dry run: nothing packaged or uploaded")
            report.success = True
            return

        pack = self.builder.build(
            changeset,
            (options.output_dir or work_dir) / options.zipname,
            environment=self.env_config.name,
            progress=on_progress
        )
        report.pack = pack

        if options.skip_upload:
            logger.info("Skipping upload, expecting the package on the target already")
        else:
            transport = self.transport
            if transport is None:
                report.fail(
                    f"No transport configured for environment {self.env_config.name}",
                    ErrorCode.MISSING_REQUIRED_PARAMETER
                )
                return
            await transport.initialize()
            await transport.upload(pack.archive_path, options.zipname)
            report.uploaded = True

        # Extraction only, commands follow one call each
        remote = await self.api_client.run(commands=[], zipname=options.zipname, delete=options.delete)
        report.remote = remote

        if not remote.success:
            report.fail(f"Extraction failed: {remote.extraction.message}", ErrorCode.ARCHIVE_FAILED)
            return

        if options.init:
            logger.info("Initial deployment: remote commands skipped")
        else:
            for command in self.commands:
                result = await self.run_command(command, options.zipname)
                report.commands.append(result)
                if on_command:
                    on_command(result)

        report.success = True

    async def run_command(self, command: str, zipname: str) -> CommandResult:
        """Run a single command through the receiver; a failed call fails only that command"""
        try:
            remote = await self.api_client.run(commands=[command], zipname=zipname)
        except (TransportError, RemoteError) as e:
            logger.error(f"Command '{command}' could not be run: {e}")
            return CommandResult(command=command, success=False, error=str(e))

        if remote.commands:
            return remote.commands[0]
        return CommandResult(command=command, success=False, error="Receiver returned no command result")

    async def _close(self) -> None:
        if self._transport is not None:
            await self._transport.close()
        if self._api_client is not None:
            await self._api_client.close()
