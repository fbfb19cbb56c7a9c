"""CLI command modules for ob."""

from .upgrade import upgrade

__all__ = ["upgrade"]
