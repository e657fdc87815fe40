"""Execution backends for post-deploy commands"""

import logging
import re
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..api.exceptions import CommandExecutionError
from ..constants import (
    COMMAND_OUTPUT_LIMIT,
    DEFAULT_COMMAND_PREFIX,
    DEFAULT_COMMAND_TIMEOUT,
    TRUNCATION_MARKER,
)
from ..core.command_parser import CommandSpec, parse_command, to_argv
from ..models.result import CommandResult

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')


@dataclass
class CommandOutput:
    """Captured text of one command; error is None on success"""
    output: str = ""
    error: Optional[str] = None


def clean_output(text: str, limit: int = COMMAND_OUTPUT_LIMIT) -> str:
    """
    Strip markup tags and cap the length of command output

    Args:
        text: Raw output
        limit: Maximum number of characters kept

    Returns:
        Cleaned output, with a truncation marker when shortened
    """
    text = _TAG_RE.sub('', text or '').strip()
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


class CommandRunner(ABC):
    """Runs a parsed command and captures its output"""

    @abstractmethod
    def run(self, spec: CommandSpec) -> CommandOutput:
        """
        Execute one command

        Args:
            spec: Parsed command

        Returns:
            CommandOutput

        Raises:
            CommandExecutionError: If the command could not be run at all
        """
        pass

    def execute(self, command_line: str) -> CommandResult:
        """
        Parse and run a command line, never raising

        Args:
            command_line: Command text, e.g. "migrate --force"

        Returns:
            CommandResult with cleaned output and timing
        """
        start_time = time.monotonic()

        try:
            result = self.run(parse_command(command_line))
            output, error = result.output, result.error
        except Exception as e:
            output, error = "", str(e) or e.__class__.__name__

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if error is not None:
            logger.error(f"Command '{command_line}' failed: {error}")
        else:
            logger.info(f"Command '{command_line}' completed in {duration_ms} ms")

        return CommandResult(
            command=command_line,
            success=error is None,
            output=clean_output(output),
            error=error,
            duration_ms=duration_ms
        )

    def execute_all(self, command_lines: List[str]) -> List[CommandResult]:
        """Run each command in order; a failure never stops the rest"""
        return [self.execute(line) for line in command_lines]


class SubprocessCommandRunner(CommandRunner):
    """Runs commands as child processes behind a fixed prefix (e.g. php artisan)"""

    def __init__(self,
                 prefix: Optional[List[str]] = None,
                 cwd: Union[str, Path, None] = None,
                 timeout: int = DEFAULT_COMMAND_TIMEOUT):
        """
        Args:
            prefix: Executable and leading arguments
            cwd: Working directory for commands
            timeout: Seconds before a command is killed
        """
        self.prefix = list(DEFAULT_COMMAND_PREFIX if prefix is None else prefix)
        self.cwd = Path(cwd) if cwd else None
        self.timeout = timeout

    def build_argv(self, spec: CommandSpec) -> List[str]:
        return self.prefix + to_argv(spec)

    def run(self, spec: CommandSpec) -> CommandOutput:
        argv = self.build_argv(spec)
        logger.debug(f"Running: {' '.join(argv)}")

        try:
            completed = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise CommandExecutionError(f"Command timed out after {self.timeout} seconds") from e
        except OSError as e:
            raise CommandExecutionError(f"Cannot execute {argv[0]}: {e}") from e

        output = completed.stdout or ""
        if completed.returncode != 0:
            error = (completed.stderr or "").strip() or f"Command exited with status {completed.returncode}"
            return CommandOutput(output=output, error=error)

        return CommandOutput(output=output)


CommandHandler = Callable[[CommandSpec], Optional[str]]


class CallableCommandRunner(CommandRunner):
    """Runs commands registered as in-process Python callables

    A handler receives the parsed CommandSpec and returns its text output;
    raising marks the command as failed.
    """

    def __init__(self, handlers: Optional[Dict[str, CommandHandler]] = None):
        self.handlers: Dict[str, CommandHandler] = dict(handlers or {})

    def register(self, name: str, handler: Optional[CommandHandler] = None):
        """Register a handler, usable directly or as a decorator"""
        if handler is not None:
            self.handlers[name] = handler
            return handler

        def decorator(func: CommandHandler) -> CommandHandler:
            self.handlers[name] = func
            return func

        return decorator

    def run(self, spec: CommandSpec) -> CommandOutput:
        handler = self.handlers.get(spec.name)
        if handler is None:
            raise CommandExecutionError(f"Command \"{spec.name}\" is not defined.")

        return CommandOutput(output=handler(spec) or "")
