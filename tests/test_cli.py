"""Unit tests for the deploy-sync CLI commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from deploy_sync.cli.main import cli
from deploy_sync.api.exceptions import UnauthorizedError
from deploy_sync.models.metadata import DeploymentMetadata
from deploy_sync.models.result import CommandResult

from conftest import write

CONFIG = """
environments:
  production:
    remote_base_url: http://receiver.test
    deploy_token: secret-token
exclude: [.env, tests]
"""


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Configuration file with a production environment."""
    return str(write(tmp_path / "deploy.yaml", CONFIG))


def mock_client(metadata=None, error=None):
    """Async API client double usable with 'async with'."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.fetch_metadata = AsyncMock(return_value=metadata, side_effect=error)
    return client


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_help_lists_commands(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ["deploy", "cmd", "logs", "serve", "status"]:
            assert command in result.output

    def test_missing_config(self, runner, tmp_path, monkeypatch):
        """Test commands fail cleanly without a configuration file."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("DEPLOY_SYNC_CONFIG", raising=False)

        result = runner.invoke(cli, ["status", "--env", "production"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_unknown_environment(self, runner, config_file):
        """Test an unknown environment is reported."""
        result = runner.invoke(cli, ["-c", config_file, "status", "--env", "qa"])

        assert result.exit_code == 1
        assert "not configured" in result.output


class TestStatusCommand:
    """Tests for the status command."""

    @patch("deploy_sync.cli.commands.status.DeployerApiClient")
    def test_no_deployment(self, mock_client_class, runner, config_file):
        """Test a target without metadata."""
        mock_client_class.return_value = mock_client()

        result = runner.invoke(cli, ["-c", config_file, "status", "--env", "production"])

        assert result.exit_code == 0
        assert "No deployment recorded" in result.output

    @patch("deploy_sync.cli.commands.status.DeployerApiClient")
    def test_with_deployment(self, mock_client_class, runner, config_file):
        """Test the recorded deployment is shown."""
        mock_client_class.return_value = mock_client(DeploymentMetadata(
            environment="production",
            deployed_at="2024-01-01T00:00:00+00:00",
            deployment_type="incremental",
            deployed_files_count=4,
        ))

        result = runner.invoke(cli, ["-c", config_file, "status", "--env", "production"])

        assert result.exit_code == 0
        assert "incremental" in result.output
        assert "2024-01-01T00:00:00+00:00" in result.output

    @patch("deploy_sync.cli.commands.status.DeployerApiClient")
    def test_unauthorized(self, mock_client_class, runner, config_file):
        """Test a rejected token exits with an error."""
        mock_client_class.return_value = mock_client(error=UnauthorizedError())

        result = runner.invoke(cli, ["-c", config_file, "status", "--env", "production"])

        assert result.exit_code == 1
        assert "Authentication failed" in result.output


class TestCmdCommand:
    """Tests for the cmd command."""

    @patch("deploy_sync.cli.commands.cmd.RemoteCommandService")
    def test_all_succeed(self, mock_service_class, runner, config_file):
        """Test successful commands exit with 0."""
        service = mock_service_class.return_value
        service.run = AsyncMock(return_value=[CommandResult(command="cache:clear", output="Cleared")])

        result = runner.invoke(cli, ["-c", config_file, "cmd", "--env", "production", "--cmd", "cache:clear"])

        assert result.exit_code == 0
        service.run.assert_awaited_once()
        assert service.run.await_args[0][0] == ["cache:clear"]

    @patch("deploy_sync.cli.commands.cmd.RemoteCommandService")
    def test_failure_exit_code(self, mock_service_class, runner, config_file):
        """Test a failed command makes the CLI exit with 1."""
        service = mock_service_class.return_value
        service.run = AsyncMock(return_value=[
            CommandResult(command="migrate", success=False, error="boom"),
        ])

        result = runner.invoke(cli, ["-c", config_file, "cmd", "--env", "production", "--cmd", "migrate"])

        assert result.exit_code == 1

    def test_cmd_required(self, runner, config_file):
        """Test at least one --cmd is required."""
        result = runner.invoke(cli, ["-c", config_file, "cmd", "--env", "production"])
        assert result.exit_code == 2


class TestDeployCommand:
    """Tests for the deploy command."""

    def test_full_dry_run(self, runner, config_file, project, monkeypatch):
        """Test a full dry run reports changes without contacting the receiver."""
        monkeypatch.chdir(project)

        result = runner.invoke(cli, ["-c", config_file, "deploy", "--env", "production", "--full", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert "full" in result.output

    def test_invalid_zipname(self, runner, config_file, project, monkeypatch):
        """Test a package name with a directory fails."""
        monkeypatch.chdir(project)

        result = runner.invoke(cli, [
            "-c", config_file, "deploy", "--env", "production", "--full", "--zipname", "../x.zip",
        ])

        assert result.exit_code == 1
        assert "Deployment failed" in result.output


class TestLogsCommand:
    """Tests for the logs command."""

    def test_no_transport(self, runner, config_file):
        """Test logs need a transport."""
        result = runner.invoke(cli, ["-c", config_file, "logs", "--env", "production"])

        assert result.exit_code == 1
        assert "No transport configured" in result.output

    def test_tail(self, runner, tmp_path, target):
        """Test the tail of a remote log is printed."""
        write(target / "storage" / "logs" / "laravel.log", "first\nsecond\nthird\n")
        config_file = write(tmp_path / "logs.yaml", (
            "environments:\n"
            "  production:\n"
            "    transport:\n"
            "      type: filesystem\n"
            f"      path: {target}\n"
        ))

        result = runner.invoke(cli, ["-c", str(config_file), "logs", "--env", "production", "--tail", "2"])

        assert result.exit_code == 0, result.output
        assert "second" in result.output
        assert "third" in result.output
        assert "first" not in result.output
