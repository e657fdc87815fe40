"""Transport abstract base class"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from ..models.config import TransportConfig

ProgressCallback = Callable[[int, int], None]


def join_remote(base: str, remote_path: str) -> str:
    """Join a transport root and a relative path with forward slashes"""
    base = (base or "").rstrip("/")
    remote_path = remote_path.lstrip("/")
    if not base:
        return remote_path
    return f"{base}/{remote_path}"


class Transport(ABC):
    """Moves files between the client and the deployment target

    One instance holds one connection: open it once (initialize or
    ``async with``), reuse it for every transfer of a deployment and
    close it at the end.
    """

    def __init__(self, config: TransportConfig):
        """
        Initialize transport

        Args:
            config: Transport configuration
        """
        self.config = config
        self._initialized = False

    async def initialize(self) -> None:
        """Open the connection if not already open"""
        if not self._initialized:
            await self._do_initialize()
            self._initialized = True

    @abstractmethod
    async def _do_initialize(self) -> None:
        """Actual connection logic to be implemented by subclasses"""
        pass

    @abstractmethod
    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     callback: Optional[ProgressCallback] = None) -> int:
        """
        Upload a file, creating missing remote directories

        Args:
            local_path: Local file path
            remote_path: Path relative to the transport root
            callback: Progress callback (bytes_transferred, total_bytes)

        Returns:
            Number of bytes uploaded

        Raises:
            TransportError: On connection or transfer failure
        """
        pass

    @abstractmethod
    async def download(self,
                       remote_path: str,
                       local_path: Path,
                       callback: Optional[ProgressCallback] = None) -> int:
        """
        Download a file

        Args:
            remote_path: Path relative to the transport root
            local_path: Local destination
            callback: Progress callback (bytes_transferred, total_bytes)

        Returns:
            Number of bytes downloaded

        Raises:
            TransportError: On connection or transfer failure
        """
        pass

    @abstractmethod
    async def read_at(self, remote_path: str, offset: int, length: Optional[int] = None) -> bytes:
        """
        Read part of a remote file

        Args:
            remote_path: Path relative to the transport root
            offset: Byte offset to start reading from
            length: Maximum number of bytes, None for the rest of the file

        Returns:
            Bytes read (empty at or past end of file)

        Raises:
            TransportError: On connection or transfer failure
        """
        pass

    @abstractmethod
    async def size(self, remote_path: str) -> Optional[int]:
        """
        Size of a remote file

        Args:
            remote_path: Path relative to the transport root

        Returns:
            Size in bytes, or None if the file does not exist
        """
        pass

    async def close(self) -> None:
        """Close the connection"""
        if self._initialized:
            await self._do_close()
            self._initialized = False

    async def _do_close(self) -> None:
        """Actual cleanup logic to be implemented by subclasses"""
        pass

    async def __aenter__(self):
        """Async context manager entry"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
