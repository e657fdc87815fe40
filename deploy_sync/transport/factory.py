"""Transport factory"""

from typing import Dict, Type

from .base import Transport
from .filesystem import FileSystemTransport
from .ftp import FtpTransport
from ..constants import TransportType
from ..models.config import TransportConfig

# Registry of transports
_transports: Dict[TransportType, Type[Transport]] = {
    TransportType.FTP: FtpTransport,
    TransportType.FILESYSTEM: FileSystemTransport,
}


def create_transport(config: TransportConfig) -> Transport:
    """
    Create a transport from configuration

    Args:
        config: Transport configuration

    Returns:
        Unopened Transport instance

    Raises:
        ValueError: If the transport type is not supported
    """
    transport_type = config.transport_type

    if transport_type not in _transports:
        raise ValueError(f"Unsupported transport type: {transport_type.value}")

    return _transports[transport_type](config)
