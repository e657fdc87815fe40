"""Utility helpers for deploy-sync"""

from .async_utils import run_async
from .file_utils import format_size, remove_path
from .hash_utils import calculate_md5, calculate_optional_md5
from .git_utils import GitRepository, NameStatusEntry, parse_name_status

__all__ = [
    "run_async",
    "format_size",
    "remove_path",
    "calculate_md5",
    "calculate_optional_md5",
    "GitRepository",
    "NameStatusEntry",
    "parse_name_status",
]
