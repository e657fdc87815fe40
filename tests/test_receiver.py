"""Tests for the server-side deployment pipeline and command runners."""

import pytest

from deploy_sync.api.exceptions import InvalidEnvironmentError, UnauthorizedError
from deploy_sync.constants import METADATA_FILE, TRUNCATION_MARKER
from deploy_sync.core.metadata_store import MetadataStore
from deploy_sync.models.metadata import DeploymentMetadata
from deploy_sync.receiver.command_runner import (
    CallableCommandRunner,
    SubprocessCommandRunner,
    clean_output,
)
from deploy_sync.receiver.receiver import DeploymentReceiver, RunRequest

from conftest import make_damaged_package, make_package, write


@pytest.fixture
def runner():
    """In-process command runner with a few handlers."""
    runner = CallableCommandRunner()

    @runner.register("migrate")
    def migrate(spec):
        raise RuntimeError("SQLSTATE[HY000] connection refused")

    runner.register("config:cache", lambda spec: "<info>Configuration cached successfully.</info>")
    runner.register("cache:clear", lambda spec: "Application cache cleared")
    return runner


@pytest.fixture
def receiver(config, runner, target):
    """Receiver applying packages to the target root."""
    return DeploymentReceiver(config, runner, target)


def incremental_metadata(deleted=None):
    """Metadata of an incremental package."""
    return DeploymentMetadata(
        environment="production",
        deployed_at="2024-01-01T00:00:00+00:00",
        deployment_type="incremental",
        deleted_files=deleted or [],
    )


class TestCleanOutput:
    """Tests for command output cleanup."""

    def test_strips_tags(self):
        """Test markup tags and surrounding whitespace are removed."""
        assert clean_output("  <info>Done</info>\n") == "Done"

    def test_truncates(self):
        """Test long output is cut with a marker."""
        cleaned = clean_output("x" * 600)
        assert cleaned == "x" * 500 + TRUNCATION_MARKER


class TestCallableCommandRunner:
    """Tests for the in-process runner."""

    def test_failure_isolation(self, runner):
        """Test a failing command does not stop the following ones."""
        results = runner.execute_all(["migrate --force", "config:cache"])

        assert [r.command for r in results] == ["migrate --force", "config:cache"]
        assert not results[0].success
        assert "connection refused" in results[0].error
        assert results[1].success
        assert results[1].output == "Configuration cached successfully."

    def test_unknown_command(self, runner):
        """Test an unregistered command fails with a clear error."""
        result = runner.execute("route:cache")
        assert not result.success
        assert result.error == 'Command "route:cache" is not defined.'

    def test_handler_receives_parsed_spec(self):
        """Test handlers get the parsed options."""
        runner = CallableCommandRunner()
        seen = []
        runner.register("queue:work", lambda spec: seen.append(spec.flags))

        result = runner.execute("queue:work --tries=3")

        assert result.success
        assert result.output == ""
        assert seen == [{"--tries": 3}]

    def test_empty_command_line(self, runner):
        """Test an empty command line becomes a failed result."""
        result = runner.execute("  ")
        assert not result.success
        assert result.error == "Empty command"


class TestSubprocessCommandRunner:
    """Tests for the child process runner."""

    def test_output_captured(self, tmp_path):
        """Test stdout is captured and the prefix is prepended."""
        runner = SubprocessCommandRunner(prefix=["echo"], cwd=tmp_path)

        result = runner.execute("hello --name=world")

        assert result.success
        assert result.output == "hello --name=world"

    def test_non_zero_exit(self, tmp_path):
        """Test a failing process is reported with its status."""
        runner = SubprocessCommandRunner(prefix=["false"], cwd=tmp_path)

        result = runner.execute("anything")

        assert not result.success
        assert result.error == "Command exited with status 1"

    def test_missing_executable(self, tmp_path):
        """Test an executable that cannot be started fails the command."""
        runner = SubprocessCommandRunner(prefix=["deploy-sync-no-such-binary"], cwd=tmp_path)

        result = runner.execute("migrate")

        assert not result.success
        assert "Cannot execute" in result.error


class TestAuthenticate:
    """Tests for token and environment checks."""

    def test_valid(self, receiver):
        """Test the right token returns the environment."""
        assert receiver.authenticate("production", "secret-token").name == "production"

    def test_unknown_environment(self, receiver):
        """Test an unknown environment is rejected."""
        with pytest.raises(InvalidEnvironmentError):
            receiver.authenticate("nope", "secret-token")

    @pytest.mark.parametrize("token", [None, "", "wrong", "staging-token"])
    def test_bad_token(self, receiver, token):
        """Test missing or mismatched tokens are rejected."""
        with pytest.raises(UnauthorizedError):
            receiver.authenticate("production", token)


class TestRun:
    """Tests for DeploymentReceiver.run."""

    def test_full_pipeline(self, receiver, target):
        """Test deletes, extraction, auto-deletes and commands run in order."""
        write(target / "manual.txt", "remove me")
        write(target / "app" / "Old.php", "old")
        make_package(
            target / "deploy.zip",
            {"app/New.php": "new"},
            incremental_metadata(deleted=["app/Old.php"]),
        )

        result = receiver.run(RunRequest(
            env="production",
            token="secret-token",
            delete=["manual.txt"],
        ))

        assert result.success
        assert result.deletions.deleted == ["manual.txt"]
        assert result.auto_deletions.deleted == ["app/Old.php"]
        assert result.extraction.deployment_type == "incremental"
        assert [c.command for c in result.commands] == ["migrate --force", "config:cache"]
        assert not result.commands[0].success
        assert result.commands[1].success
        assert (target / "app" / "New.php").exists()
        assert not (target / "app" / "Old.php").exists()
        assert MetadataStore(target).read().deployment_type == "incremental"

    def test_environment_commands_override_defaults(self, receiver, target):
        """Test an environment's own command list replaces the defaults."""
        result = receiver.run(RunRequest(env="staging", token="staging-token"))
        assert [c.command for c in result.commands] == ["cache:clear"]

    def test_empty_command_list_runs_nothing(self, receiver):
        """Test an explicit empty list means extraction only."""
        result = receiver.run(RunRequest(env="production", token="secret-token", commands=[]))
        assert result.commands == []

    def test_missing_package_is_not_a_failure(self, receiver):
        """Test a command-only call without a package succeeds."""
        result = receiver.run(RunRequest(
            env="production",
            token="secret-token",
            commands=["cache:clear"],
            zipname="skip-deployment.zip",
        ))

        assert result.success
        assert not result.extraction.success
        assert result.extraction.message == "Package skip-deployment.zip not found"
        assert result.auto_deletions is None
        assert result.commands[0].output == "Application cache cleared"

    def test_failed_extraction_fails_result(self, receiver, target):
        """Test a corrupt package marks the result failed but commands still run."""
        write(target / "deploy.zip", "garbage")

        result = receiver.run(RunRequest(env="production", token="secret-token", commands=["cache:clear"]))

        assert not result.success
        assert result.commands[0].success

    def test_damaged_member_keeps_pipeline_running(self, receiver, target):
        """Test corrupt compressed data is recorded and the commands still run."""
        make_damaged_package(target / "deploy.zip", "app/Broken.php", b"<?php echo 1;\n" * 200)
        write(target / "manual.txt", "remove me")

        result = receiver.run(RunRequest(
            env="production", token="secret-token", commands=["cache:clear"], delete=["manual.txt"],
        ))

        assert result.extraction.success is False
        assert result.extraction.errors_count == 1
        assert not result.success
        assert result.deletions.deleted == ["manual.txt"]
        assert result.commands[0].success
        assert result.commands[0].output == "Application cache cleared"

    def test_stale_metadata_does_not_delete(self, receiver, target):
        """Test deleted_files of an earlier deployment are not replayed."""
        MetadataStore(target).write(incremental_metadata(deleted=["app/Keep.php"]))
        write(target / "app" / "Keep.php", "keep")

        result = receiver.run(RunRequest(env="production", token="secret-token", commands=[]))

        assert result.auto_deletions is None
        assert (target / "app" / "Keep.php").exists()

    def test_auth_failure_touches_nothing(self, receiver, target):
        """Test a rejected request neither extracts nor deletes."""
        make_package(target / "deploy.zip", {"app/New.php": "new"})
        write(target / "manual.txt", "keep")

        with pytest.raises(UnauthorizedError):
            receiver.run(RunRequest(env="production", token="wrong", delete=["manual.txt"]))

        assert (target / "deploy.zip").exists()
        assert (target / "manual.txt").exists()
        assert not (target / METADATA_FILE).exists()


class TestFetchMetadata:
    """Tests for DeploymentReceiver.fetch_metadata."""

    def test_none_before_first_deployment(self, receiver):
        """Test a fresh target has no record."""
        assert receiver.fetch_metadata("production", "secret-token") is None

    def test_returns_record(self, receiver, target):
        """Test the stored record is returned."""
        MetadataStore(target).write(incremental_metadata())
        assert receiver.fetch_metadata("production", "secret-token").deployment_type == "incremental"
