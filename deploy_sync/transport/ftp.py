"""FTP transport"""

import asyncio
import ftplib
import logging
import posixpath
from io import BytesIO
from pathlib import Path
from typing import Optional

from .base import Transport, ProgressCallback, join_remote
from ..api.exceptions import TransportError
from ..constants import DEFAULT_CHUNK_SIZE
from ..models.config import TransportConfig

logger = logging.getLogger(__name__)


class FtpTransport(Transport):
    """FTP transport keeping one control connection open per deployment

    ftplib is blocking, so every call runs in the default executor.
    """

    def __init__(self, config: TransportConfig):
        super().__init__(config)
        self._ftp: Optional[ftplib.FTP] = None

    async def _run(self, func, *args):
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except ftplib.all_errors as e:
            raise TransportError(f"FTP error: {e}") from e

    def _connect(self) -> ftplib.FTP:
        ftp = ftplib.FTP(timeout=self.config.timeout)
        ftp.connect(self.config.host, self.config.port)
        ftp.login(self.config.username or "anonymous", self.config.password or "")
        ftp.set_pasv(self.config.passive)
        return ftp

    async def _do_initialize(self) -> None:
        self._ftp = await self._run(self._connect)
        logger.debug(f"Connected to {self.config.get_display_info()}")

    async def _do_close(self) -> None:
        ftp, self._ftp = self._ftp, None
        if ftp is None:
            return

        try:
            await self._run(ftp.quit)
        except TransportError as e:
            logger.debug(f"FTP quit failed, closing socket: {e}")
            ftp.close()

    def _remote(self, remote_path: str) -> str:
        return join_remote(self.config.path, remote_path)

    def _make_dirs(self, remote_dir: str) -> None:
        if not remote_dir or remote_dir in ('/', '.'):
            return

        current = '/' if remote_dir.startswith('/') else ''
        for part in remote_dir.strip('/').split('/'):
            current = posixpath.join(current, part) if current else part
            try:
                self._ftp.mkd(current)
            except ftplib.error_perm:
                # Already exists
                continue

    def _store(self, local_path: Path, remote: str, callback: Optional[ProgressCallback]) -> int:
        total_size = local_path.stat().st_size
        transferred = 0

        def on_block(block: bytes) -> None:
            nonlocal transferred
            transferred += len(block)
            if callback:
                callback(transferred, total_size)

        self._make_dirs(posixpath.dirname(remote))
        with open(local_path, 'rb') as fh:
            self._ftp.storbinary(f"STOR {remote}", fh, blocksize=DEFAULT_CHUNK_SIZE, callback=on_block)
        return transferred

    def _retrieve(self, remote: str, local_path: Path, callback: Optional[ProgressCallback]) -> int:
        total_size = self._size(remote) or 0
        transferred = 0
        local_path.parent.mkdir(parents=True, exist_ok=True)

        with open(local_path, 'wb') as fh:
            def on_block(block: bytes) -> None:
                nonlocal transferred
                fh.write(block)
                transferred += len(block)
                if callback:
                    callback(transferred, total_size)

            self._ftp.retrbinary(f"RETR {remote}", on_block, blocksize=DEFAULT_CHUNK_SIZE)
        return transferred

    def _read(self, remote: str, offset: int) -> bytes:
        buffer = BytesIO()
        self._ftp.retrbinary(f"RETR {remote}", buffer.write, rest=offset or None)
        return buffer.getvalue()

    def _size(self, remote: str) -> Optional[int]:
        # SIZE is only reliable in binary mode
        self._ftp.sendcmd("TYPE I")
        try:
            return self._ftp.size(remote)
        except ftplib.error_perm:
            return None

    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     callback: Optional[ProgressCallback] = None) -> int:
        """Upload a file, creating missing directories"""
        await self.initialize()
        remote = self._remote(remote_path)

        try:
            size = await self._run(self._store, Path(local_path), remote, callback)
        except OSError as e:
            raise TransportError(f"Cannot read {local_path}: {e}") from e

        logger.debug(f"Uploaded {local_path} to {remote} ({size} bytes)")
        return size

    async def download(self,
                       remote_path: str,
                       local_path: Path,
                       callback: Optional[ProgressCallback] = None) -> int:
        """Download a file"""
        await self.initialize()
        return await self._run(self._retrieve, self._remote(remote_path), Path(local_path), callback)

    async def read_at(self, remote_path: str, offset: int, length: Optional[int] = None) -> bytes:
        await self.initialize()
        data = await self._run(self._read, self._remote(remote_path), offset)
        return data if length is None else data[:length]

    async def size(self, remote_path: str) -> Optional[int]:
        await self.initialize()
        return await self._run(self._size, self._remote(remote_path))
