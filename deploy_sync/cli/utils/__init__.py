"""CLI utilities"""

from .output import console

__all__ = ["console"]
