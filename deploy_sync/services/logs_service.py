"""Remote log tail, follow and download"""

import asyncio
import logging
import re
from pathlib import Path, PurePosixPath
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Tuple, Union

from ..api.exceptions import PathSafetyError, RemoteFileNotFoundError, TransportError
from ..constants import (
    DEFAULT_TAIL_LINES,
    LOG_POLL_INTERVAL,
    LOGS_DIR,
    TAIL_BYTES_PER_LINE,
)
from ..transport.base import Transport

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r'[\\/]+')


def resolve_log_path(path: str) -> str:
    """
    Map a user supplied log name to its path below the logs directory

    Traversal segments are dropped.

    Args:
        path: Log file path relative to the logs directory

    Returns:
        Path relative to the transport root

    Raises:
        PathSafetyError: If nothing usable remains
    """
    segments = [s for s in _SEPARATORS.split(path or '') if s not in ('', '.', '..')]
    if not segments:
        raise PathSafetyError(path, "invalid path")
    return f"{LOGS_DIR}/{'/'.join(segments)}"


def split_lines(data: bytes) -> List[str]:
    text = data.decode('utf-8', errors='replace').rstrip()
    if not text:
        return []
    return text.split('\n')


def server_copy_name(remote_path: str) -> str:
    """laravel.log -> laravel-server.log"""
    name = PurePosixPath(remote_path)
    extension = name.suffix.lstrip('.') or 'log'
    return f"{name.stem}-server.{extension}"


class LogsService:
    """Reads remote log files through a Transport"""

    def __init__(self,
                 transport: Transport,
                 project_root: Union[str, Path, None] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """
        Args:
            transport: Opened or openable transport to the target root
            project_root: Local project root for downloads
            sleep: Coroutine used between polls
        """
        self.transport = transport
        self.project_root = Path(project_root or Path.cwd())
        self._sleep = sleep

    async def size(self, path: str) -> int:
        """
        Size of a remote log

        Raises:
            RemoteFileNotFoundError: If missing or empty
        """
        remote_path = resolve_log_path(path)
        size = await self.transport.size(remote_path)
        if not size:
            raise RemoteFileNotFoundError(remote_path)
        return size

    async def tail(self, path: str, lines: int = DEFAULT_TAIL_LINES) -> Tuple[List[str], int]:
        """
        Last lines of a remote log

        Only the trailing lines * 300 bytes are fetched.

        Args:
            path: Log file relative to the logs directory
            lines: Number of lines wanted

        Returns:
            Tuple of (lines, file size at read time)
        """
        remote_path = resolve_log_path(path)
        size = await self.size(path)

        fetch = min(size, max(lines, 1) * TAIL_BYTES_PER_LINE)
        data = await self.transport.read_at(remote_path, size - fetch)

        result = split_lines(data)
        if len(result) > lines:
            result = result[-lines:]
        return result, size

    async def follow(self,
                     path: str,
                     lines: int = DEFAULT_TAIL_LINES,
                     interval: float = LOG_POLL_INTERVAL,
                     max_polls: Optional[int] = None) -> AsyncIterator[str]:
        """
        Yield the tail of a log, then new lines as they are appended

        A shrinking file (rotation, truncation) restarts reading from its
        new end.

        Args:
            path: Log file relative to the logs directory
            lines: Initial tail length
            interval: Seconds between size polls
            max_polls: Stop after this many polls (None polls forever)
        """
        remote_path = resolve_log_path(path)
        initial, offset = await self.tail(path, lines)
        for line in initial:
            yield line

        polls = 0
        while max_polls is None or polls < max_polls:
            polls += 1
            await self._sleep(interval)

            new_size = await self.transport.size(remote_path) or 0
            if new_size > offset:
                data = await self.transport.read_at(remote_path, offset)
                offset += len(data)
                for line in split_lines(data):
                    yield line
            elif new_size < offset:
                logger.info(f"{remote_path} was truncated, following from its new end")
                offset = new_size

    def download_target(self, path: str) -> Path:
        """Local destination for a downloaded log"""
        return self.project_root / LOGS_DIR / server_copy_name(resolve_log_path(path))

    async def download(self, path: str, destination: Optional[Path] = None) -> Path:
        """
        Download a whole log file

        Args:
            path: Log file relative to the logs directory
            destination: Local file (defaults to <name>-server.<ext> under the
                local logs directory)

        Returns:
            Local path written
        """
        remote_path = resolve_log_path(path)
        target = Path(destination) if destination else self.download_target(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        try:
            await self.transport.download(remote_path, target)
        except TransportError:
            target.unlink(missing_ok=True)
            raise

        logger.info(f"Downloaded {remote_path} to {target}")
        return target
