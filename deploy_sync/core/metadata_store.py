"""Persisted deployment metadata at the target root"""

import json
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from ..constants import METADATA_FILE, LEGACY_METADATA_FILE
from ..models.metadata import DeploymentMetadata
from ..utils.file_utils import atomic_write_stream

logger = logging.getLogger(__name__)


class MetadataStore:
    """Reads and writes the single metadata document of a target root"""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @property
    def path(self) -> Path:
        return self.root / METADATA_FILE

    @property
    def legacy_path(self) -> Path:
        return self.root / LEGACY_METADATA_FILE

    def locate(self) -> Optional[Path]:
        """Return the metadata file in use, preferring the current name"""
        for candidate in (self.path, self.legacy_path):
            if candidate.is_file():
                return candidate
        return None

    def exists(self) -> bool:
        return self.locate() is not None

    def read(self) -> Optional[DeploymentMetadata]:
        """
        Load the last deployment record

        Returns:
            DeploymentMetadata, or None if absent or unreadable
        """
        path = self.locate()
        if path is None:
            return None

        try:
            return DeploymentMetadata.from_json(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Ignoring unreadable deployment metadata {path}: {e}")
            return None

    def write(self, metadata: DeploymentMetadata) -> Path:
        """
        Overwrite the deployment record

        Args:
            metadata: Record to persist

        Returns:
            Path written
        """
        payload = json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False).encode('utf-8')
        atomic_write_stream(BytesIO(payload), self.path)
        logger.debug(f"Wrote deployment metadata to {self.path}")
        return self.path
