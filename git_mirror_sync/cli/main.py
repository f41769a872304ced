"""
Command-line interface for the git mirror sync tool.
"""

import sys
from typing import List, Optional

from git_mirror_sync.cli.base_command import BaseCommand
from git_mirror_sync.cli.commands.sync_command import sync_command
from git_mirror_sync.core.config import get_env_variable


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI tool."""
    command = BaseCommand(
        description="Universal one-way git mirror",
        epilog="""
WARNING: destinations are force-pushed every cycle. Commits, branches or
tags pushed directly to a destination are overwritten and lost.

Examples:
    git-mirror-sync --config repos.json
    git-mirror-sync --config repos.csv --interval 600 --sync-dir /var/lib/git-mirrors
    git-mirror-sync --config repos.json --once --debug
        """,
    )

    command.behavior_group.add_argument(
        "-i",
        "--interval",
        type=int,
        help="Seconds to sleep between sync cycles (default: from GIT_MIRROR_INTERVAL or 300)",
        default=get_env_variable("GIT_MIRROR_INTERVAL"),
    )
    command.behavior_group.add_argument(
        "--clone-retries",
        type=int,
        help="Clone attempts per repository (default: from GIT_MIRROR_CLONE_RETRIES or 3)",
        default=get_env_variable("GIT_MIRROR_CLONE_RETRIES"),
    )
    command.behavior_group.add_argument(
        "--push-retries",
        type=int,
        help="Push attempts per repository (default: from GIT_MIRROR_PUSH_RETRIES or 3)",
        default=get_env_variable("GIT_MIRROR_PUSH_RETRIES"),
    )
    command.behavior_group.add_argument(
        "--retry-delay",
        type=float,
        help="Seconds between failed attempts (default: from GIT_MIRROR_RETRY_DELAY or 5)",
        default=get_env_variable("GIT_MIRROR_RETRY_DELAY"),
    )
    command.behavior_group.add_argument(
        "--size-threshold",
        type=int,
        help="Strip files larger than this many bytes from history "
        "(default: from GIT_MIRROR_SIZE_THRESHOLD or 104857600)",
        default=get_env_variable("GIT_MIRROR_SIZE_THRESHOLD"),
    )
    command.behavior_group.add_argument(
        "--once",
        action="store_true",
        help="Run a single sync cycle and exit",
    )

    args = command.parse_args(argv)
    command.verify_required_args(args, ["config"])

    return command.run_command(
        sync_command,
        config_file=args.config,
        sync_dir=args.sync_dir,
        interval=args.interval,
        clone_retries=args.clone_retries,
        push_retries=args.push_retries,
        retry_delay=args.retry_delay,
        size_threshold=args.size_threshold,
        once=args.once,
    )


if __name__ == "__main__":
    sys.exit(main())
