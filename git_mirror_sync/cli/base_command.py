"""
Base command utilities for standardizing CLI interfaces.
"""

import argparse
import logging
import sys
import traceback
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv

from git_mirror_sync.core.config import DEFAULT_SYNC_DIR, get_env_variable
from git_mirror_sync.core.exceptions import ConfigError, MirrorError


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for the application with a standardized format.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(message)s",
        level=level,
        force=True,
    )


class BaseCommand:
    """Base class for standardizing command-line interfaces."""

    def __init__(
        self,
        description: str,
        epilog: Optional[str] = None,
        formatter_class: Any = argparse.RawDescriptionHelpFormatter,
    ):
        """
        Initialize the base command.

        Args:
            description: Command description for help text
            epilog: Optional epilog text for help output
            formatter_class: Argument parser formatter class
        """
        # Setup logging
        setup_logging()

        # Load environment variables
        load_dotenv()

        # Create parser
        self.parser = argparse.ArgumentParser(
            description=description, epilog=epilog, formatter_class=formatter_class
        )

        # Add common argument groups
        self.input_group = self.parser.add_argument_group("Input")
        self.behavior_group = self.parser.add_argument_group("Behavior")
        self.debug_group = self.parser.add_argument_group("Debug Options")

        # Add standard arguments
        self._add_standard_arguments()

    def _add_standard_arguments(self) -> None:
        """Add standard arguments that apply to every command."""
        self.input_group.add_argument(
            "-c",
            "--config",
            help="JSON or CSV file with repository mappings "
            "(default: from GIT_MIRROR_CONFIG env var)",
            default=get_env_variable("GIT_MIRROR_CONFIG"),
        )
        self.input_group.add_argument(
            "-d",
            "--sync-dir",
            help="Directory for bare mirror clones (default: from GIT_MIRROR_SYNC_DIR env var "
            "or %s)" % DEFAULT_SYNC_DIR,
            default=get_env_variable("GIT_MIRROR_SYNC_DIR") or str(DEFAULT_SYNC_DIR),
        )

        self.debug_group.add_argument("--debug", help="Enable debug logging", action="store_true")

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command line arguments.

        Args:
            argv: Arguments to parse instead of sys.argv

        Returns:
            Parsed command line arguments
        """
        args = self.parser.parse_args(argv)

        # Enable debug logging if requested
        if args.debug:
            setup_logging(logging.DEBUG)

        return args

    def verify_required_args(self, args: argparse.Namespace, required_args: List[str]) -> None:
        """
        Verify required arguments are present.

        Args:
            args: Parsed command line arguments
            required_args: List of required argument names

        Raises:
            SystemExit: If any required arguments are missing
        """
        missing = []
        for arg_name in required_args:
            if not getattr(args, arg_name.replace("-", "_")):
                missing.append(arg_name)

        if missing:
            self.parser.error(f"Missing required arguments: {', '.join(missing)}")

    def run_command(self, command_func: Callable, *args, **kwargs) -> Any:
        """
        Run the command function with standardized error handling.

        Args:
            command_func: Function to run
            *args: Positional arguments for the command function
            **kwargs: Keyword arguments for the command function

        Returns:
            Whatever the command function returned

        Exit codes:
            1 - Configuration error
            2 - Mirror operation error
            3 - Unexpected error
        """
        try:
            return command_func(*args, **kwargs)
        except ConfigError as e:
            logging.error("Configuration error: %s", e)
            sys.exit(1)
        except MirrorError as e:
            logging.error("Mirror operation failed: %s", e)
            sys.exit(2)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logging.error("Unexpected error: %s", e)
            traceback.print_exc()
            sys.exit(3)
