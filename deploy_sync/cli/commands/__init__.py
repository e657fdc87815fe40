"""CLI commands"""

from . import deploy
from . import cmd
from . import logs
from . import serve
from . import status

__all__ = [
    "deploy",
    "cmd",
    "logs",
    "serve",
    "status",
]
