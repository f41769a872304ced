"""
Custom exceptions for the git mirror sync project.

This module provides a hierarchy of exceptions used throughout the project.
"""

from typing import List


class MirrorError(Exception):
    """Base exception for mirroring operations."""


class ConfigError(MirrorError):
    """Configuration related errors."""


class GitCommandError(MirrorError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = "%s exited with %d" % (" ".join(command), returncode)
        if self.stderr:
            message = "%s: %s" % (message, self.stderr)
        super().__init__(message)


class SyncError(MirrorError):
    """A stage of the per-repository sync pipeline failed."""


class AcquisitionError(SyncError):
    """Cloning the source repository failed after all retries."""


class HistoryRewriteError(SyncError):
    """A local history rewrite (root-commit conversion or filtering) failed."""


class PublishError(SyncError):
    """Pushing the snapshot to the destination failed after all retries."""
