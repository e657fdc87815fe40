"""Local or mounted filesystem transport"""

import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles

from .base import Transport, ProgressCallback
from ..api.exceptions import TransportError
from ..constants import DEFAULT_CHUNK_SIZE
from ..models.config import TransportConfig

logger = logging.getLogger(__name__)


class FileSystemTransport(Transport):
    """Transport whose target root is a directory reachable from the client"""

    def __init__(self, config: TransportConfig):
        super().__init__(config)
        self.base_path = Path(config.path)

    async def _do_initialize(self) -> None:
        if not self.base_path.is_dir():
            raise TransportError(f"Target directory does not exist: {self.base_path}")

    def _get_full_path(self, remote_path: str) -> Path:
        return self.base_path / remote_path.lstrip("/")

    async def _copy(self,
                    source: Path,
                    target: Path,
                    callback: Optional[ProgressCallback]) -> int:
        total_size = source.stat().st_size
        bytes_transferred = 0
        target.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(source, 'rb') as src:
            async with aiofiles.open(target, 'wb') as dst:
                while True:
                    chunk = await src.read(DEFAULT_CHUNK_SIZE)
                    if not chunk:
                        break

                    await dst.write(chunk)
                    bytes_transferred += len(chunk)

                    if callback:
                        callback(bytes_transferred, total_size)

        return bytes_transferred

    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     callback: Optional[ProgressCallback] = None) -> int:
        """Copy a local file under the target root"""
        await self.initialize()

        try:
            size = await self._copy(Path(local_path), self._get_full_path(remote_path), callback)
        except OSError as e:
            raise TransportError(f"Upload of {local_path} failed: {e}") from e

        logger.debug(f"Copied {local_path} to {self._get_full_path(remote_path)}")
        return size

    async def download(self,
                       remote_path: str,
                       local_path: Path,
                       callback: Optional[ProgressCallback] = None) -> int:
        """Copy a file from the target root"""
        await self.initialize()

        try:
            return await self._copy(self._get_full_path(remote_path), Path(local_path), callback)
        except OSError as e:
            raise TransportError(f"Download of {remote_path} failed: {e}") from e

    async def read_at(self, remote_path: str, offset: int, length: Optional[int] = None) -> bytes:
        await self.initialize()

        try:
            async with aiofiles.open(self._get_full_path(remote_path), 'rb') as f:
                await f.seek(offset)
                if length is None:
                    return await f.read()
                return await f.read(length)
        except OSError as e:
            raise TransportError(f"Reading {remote_path} failed: {e}") from e

    async def size(self, remote_path: str) -> Optional[int]:
        await self.initialize()

        try:
            return os.stat(self._get_full_path(remote_path)).st_size
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TransportError(f"Cannot stat {remote_path}: {e}") from e
