"""Server side: applies packages, reconciles deletions and runs commands"""

from .command_runner import (
    CallableCommandRunner,
    CommandOutput,
    CommandRunner,
    SubprocessCommandRunner,
)
from .deletion import delete_many, sanitize_relative_path
from .extractor import ArchiveExtractor
from .receiver import DeploymentReceiver, RunRequest

__all__ = [
    'CallableCommandRunner',
    'CommandOutput',
    'CommandRunner',
    'SubprocessCommandRunner',
    'delete_many',
    'sanitize_relative_path',
    'ArchiveExtractor',
    'DeploymentReceiver',
    'RunRequest',
]
