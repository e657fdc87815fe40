"""Lazy snapshot access to the local source tree"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from .path_filter import PathFilter
from ..constants import WALK_SKIP_DIRS
from ..utils.hash_utils import calculate_md5

logger = logging.getLogger(__name__)


class LocalTree:
    """Walks and fingerprints the files of a project root

    Excluded directories are pruned while walking, so large ignored trees
    (node_modules, caches) are never descended into.
    """

    def __init__(self, root: Union[str, Path], path_filter: Optional[PathFilter] = None):
        """
        Args:
            root: Project root directory
            path_filter: Exclusion rules for tracked files
        """
        self.root = Path(root).resolve()
        self.path_filter = path_filter or PathFilter()

    def absolute(self, relative_path: str) -> Path:
        """Resolve a tree-relative path"""
        return self.root / relative_path

    def exists(self, relative_path: str) -> bool:
        return self.absolute(relative_path).exists()

    def _relative(self, path: str) -> str:
        return Path(path).relative_to(self.root).as_posix()

    def iter_files(self) -> Iterator[str]:
        """
        Yield every tracked (non-excluded) file, in sorted walk order

        Yields:
            POSIX-style paths relative to the root
        """
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = self._relative(dirpath)
            kept = []
            for name in sorted(dirnames):
                if name in WALK_SKIP_DIRS:
                    continue
                rel = name if rel_dir == "." else f"{rel_dir}/{name}"
                if self.path_filter.is_excluded(rel):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                rel = name if rel_dir == "." else f"{rel_dir}/{name}"
                if self.path_filter.is_excluded(rel):
                    continue
                yield rel

    def file_hash(self, relative_path: str) -> Optional[str]:
        """MD5 of a file, or None if it cannot be read"""
        try:
            return calculate_md5(self.absolute(relative_path))
        except OSError as e:
            logger.warning(f"Cannot hash {relative_path}: {e}")
            return None

    def hash_files(self) -> Dict[str, str]:
        """
        Fingerprint every tracked file

        Returns:
            Mapping of relative path to MD5 hex digest
        """
        hashes = {}
        for relative_path in self.iter_files():
            digest = self.file_hash(relative_path)
            if digest is not None:
                hashes[relative_path] = digest
        return hashes

    def iter_subtree(self, relative_dir: str, include_dirs: bool = False) -> Iterator[Tuple[str, bool]]:
        """
        Yield everything below a directory, ignoring exclusion rules

        Directories are yielded before their contents (the starting
        directory first) when include_dirs is set, so empty directories
        are reported too.

        Args:
            relative_dir: Directory relative to the root
            include_dirs: Whether to yield directory entries

        Yields:
            (relative_path, is_dir) tuples
        """
        start = self.absolute(relative_dir)
        if not start.is_dir():
            return

        if include_dirs:
            yield relative_dir.strip("/"), True

        for dirpath, dirnames, filenames in os.walk(start):
            dirnames.sort()
            rel_dir = self._relative(dirpath)
            if include_dirs:
                for name in dirnames:
                    yield f"{rel_dir}/{name}", True
            for name in sorted(filenames):
                yield f"{rel_dir}/{name}", False
