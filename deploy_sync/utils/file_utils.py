# deploy_sync/utils/file_utils.py
"""File operation utilities"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO


def format_size(size: float) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def remove_path(path: Path) -> bool:
    """
    Remove a file, symlink or directory tree

    Args:
        path: Path to remove

    Returns:
        True if a directory tree was removed, False for a single file
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True

    path.unlink()
    return False


def atomic_write_stream(source: BinaryIO, target: Path, chunk_size: int = 1024 * 1024) -> int:
    """
    Copy a stream into target through a temporary sibling and rename it in place

    Readers of target observe either the old or the new content, never a
    partially written file.

    Args:
        source: Readable binary stream
        target: Destination file path
        chunk_size: Copy chunk size

    Returns:
        Number of bytes written
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    written = 0

    try:
        with os.fdopen(fd, 'wb') as tmp:
            while chunk := source.read(chunk_size):
                tmp.write(chunk)
                written += len(chunk)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    return written


def is_within(root: Path, target: Path) -> bool:
    """
    Check that target's parent directory resolves below root

    Args:
        root: Resolved root directory
        target: Path to check (need not exist)

    Returns:
        True if target stays inside root after symlink resolution
    """
    try:
        target.parent.resolve().relative_to(root)
    except ValueError:
        return False
    return True


def is_plain_filename(name: str) -> bool:
    """True if name is a single path component (no separators, no dots-only)"""
    return bool(name) and name not in ('.', '..') and '/' not in name and '\\' not in name
