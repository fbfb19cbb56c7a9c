"""Core utilities: configuration, paths and git plumbing."""

from __future__ import annotations

from .errors import (
    ConfigError,
    DirtyWorkingTreeError,
    GitError,
    HandoffError,
    NotAProjectError,
    ObCliError,
    ThunkError,
)

__all__ = [
    "ConfigError",
    "DirtyWorkingTreeError",
    "GitError",
    "HandoffError",
    "NotAProjectError",
    "ObCliError",
    "ThunkError",
]
