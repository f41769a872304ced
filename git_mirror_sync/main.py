"""
Main entry point for the git mirror sync tool.
"""

import sys

from git_mirror_sync.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
