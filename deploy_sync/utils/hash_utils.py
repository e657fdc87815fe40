"""Hash calculation utilities"""

import hashlib
from pathlib import Path
from typing import Optional

from ..constants import HASH_CHUNK_SIZE


def calculate_md5(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """
    Calculate MD5 hash of file

    Args:
        file_path: Path to file
        chunk_size: Read chunk size

    Returns:
        Hex digest string
    """
    md5_hash = hashlib.md5()

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            md5_hash.update(chunk)

    return md5_hash.hexdigest()


def calculate_optional_md5(file_path: Path) -> Optional[str]:
    """
    Calculate MD5 hash of a file that may not exist

    Args:
        file_path: Path to file

    Returns:
        Hex digest string, or None when the file is absent
    """
    if not file_path.is_file():
        return None
    return calculate_md5(file_path)

