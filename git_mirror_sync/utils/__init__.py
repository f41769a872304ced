"""Utility modules for the git mirror sync tool."""

from git_mirror_sync.utils.verify import MirrorVerifier, compare_refs

__all__ = [
    "MirrorVerifier",
    "compare_refs",
]
