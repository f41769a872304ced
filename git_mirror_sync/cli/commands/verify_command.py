"""
Command-line implementation for verifying mirrored destinations.

This module provides the CLI command for checking that every destination
from the mapping file advertises exactly the refs of its local snapshot.
It reports missing snapshots, unreachable destinations and diverged refs,
and writes CSV reports for troubleshooting.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from git_mirror_sync.cli.base_command import BaseCommand
from git_mirror_sync.core.config import load_repository_mappings
from git_mirror_sync.core.git import GitCli
from git_mirror_sync.utils.verify import MirrorVerifier

logger = logging.getLogger(__name__)


def verify_command(
    config_file: str, sync_dir: str, output_dir: str = ".", git: Optional[GitCli] = None
) -> int:
    """
    Compare each destination's refs with its local snapshot.

    Args:
        config_file: Path to the JSON or CSV mapping file
        sync_dir: Directory holding the local snapshots
        output_dir: Where CSV reports are written when issues are found
        git: Git client, created on demand

    Returns:
        Exit code: 0 when every destination matches, 2 otherwise

    Raises:
        ConfigError: If the mapping file is invalid
    """
    mappings = load_repository_mappings(Path(config_file))
    logger.info("Loaded %d repository mappings from %s", len(mappings), config_file)

    verifier = MirrorVerifier(git or GitCli(), Path(sync_dir), mappings)
    verifier.verify_all()
    verifier.print_report(Path(output_dir))

    return 2 if verifier.has_issues else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the verify command."""
    command = BaseCommand(
        description="Verify destinations mirror their local snapshots exactly",
        epilog="""
Examples:
    git-mirror-sync-verify --config repos.json
    git-mirror-sync-verify --config repos.json --sync-dir /var/lib/git-mirrors --debug

Output files:
    01-missing-snapshots.csv  Mappings without a local snapshot
    02-unreachable.csv        Snapshots or destinations whose refs could not be read
    03-diverged-refs.csv      Refs missing, extra or pointing elsewhere on the destination
        """,
    )
    command.behavior_group.add_argument(
        "--output-dir",
        help="Directory for CSV reports (default: current directory)",
        default=".",
    )

    args = command.parse_args(argv)
    command.verify_required_args(args, ["config"])

    return command.run_command(
        verify_command,
        config_file=args.config,
        sync_dir=args.sync_dir,
        output_dir=args.output_dir,
    )


if __name__ == "__main__":
    sys.exit(main())
