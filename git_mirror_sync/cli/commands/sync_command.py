"""
Command-line implementation for the sync command.

This module provides the CLI command that keeps every configured destination
repository an exact replica of its source, one sync cycle after another.
"""

import logging
import time
from typing import Callable, Optional

from git_mirror_sync.core.config import load_config
from git_mirror_sync.core.git import GitToolchain
from git_mirror_sync.core.mirror import MirrorService

logger = logging.getLogger(__name__)


def sync_command(
    config_file: str,
    sync_dir: Optional[str] = None,
    interval: Optional[int] = None,
    clone_retries: Optional[int] = None,
    push_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    size_threshold: Optional[int] = None,
    once: bool = False,
    toolchain: Optional[GitToolchain] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Mirror every configured repository, forever or for a single cycle.

    Each cycle re-clones every source into a fresh bare snapshot, converts
    truncated history into root commits, strips files larger than the size
    threshold from history and force-pushes all refs to the destination.

    Config file format (JSON):
        {"repos": [{"source": "git@host:org/app.git",
                    "destination": "git@backup:org/app.git",
                    "history": "full"}]}

    Config file format (CSV, no header):
        source,destination[,history]

    Args:
        config_file: Path to the JSON or CSV mapping file
        sync_dir: Directory for the local snapshots
        interval: Seconds to sleep between cycles
        clone_retries: Attempts per clone
        push_retries: Attempts per push
        retry_delay: Seconds between failed attempts
        size_threshold: Blobs larger than this many bytes are stripped
        once: Run one cycle and return instead of looping forever
        toolchain: Git operations, the git command-line client by default
        sleep: Blocking wait used for retry and cycle delays

    Returns:
        Exit code: 0 if the last cycle had no failures, 2 otherwise

    Raises:
        ConfigError: If configuration is invalid
    """
    config = load_config(
        config_file,
        sync_dir=sync_dir,
        interval=interval,
        clone_retries=clone_retries,
        push_retries=push_retries,
        retry_delay=retry_delay,
        size_threshold=size_threshold,
    )

    service = MirrorService(config, toolchain=toolchain, sleep=sleep)
    reports = service.run_forever(max_cycles=1 if once else None)

    last = reports[-1]
    if last.failed:
        logger.warning("Check logs for details on failures.")
        return 2
    return 0
