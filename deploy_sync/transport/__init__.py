"""File transports between the client and the deployment target"""

from .base import Transport
from .factory import create_transport
from .filesystem import FileSystemTransport
from .ftp import FtpTransport

__all__ = [
    'Transport',
    'create_transport',
    'FileSystemTransport',
    'FtpTransport',
]
