#!/usr/bin/env python
"""Setup script for the git mirror sync environment."""

import json
import shutil
from pathlib import Path

EXAMPLE_CONFIG = {
    "repos": [
        {
            "source": "git@github.com:example-org/app.git",
            "destination": "git@gitlab.example.com:mirrors/app.git",
            "history": "full",
        },
        {
            "source": "https://github.com/example-org/huge-monorepo.git",
            "destination": "git@gitlab.example.com:mirrors/huge-monorepo.git",
            "history": "truncated",
        },
    ]
}


def create_env_file(env_path: Path = Path(".env")) -> bool:
    """Create .env file if it doesn't exist."""
    if env_path.exists():
        print(".env file already exists.")
        overwrite = input("Do you want to overwrite it? (y/n): ").lower()
        if overwrite != "y":
            return False

    # Check if .env.example exists
    example_path = env_path.with_name(".env.example")
    if example_path.exists():
        # Copy example as starting point
        shutil.copy(example_path, env_path)
        print(f"Created .env file from .env.example at {env_path.absolute()}")
        return True

    print("Creating new .env file...")

    config_file = input("GIT_MIRROR_CONFIG [repos.json]: ") or "repos.json"
    sync_dir = input("GIT_MIRROR_SYNC_DIR [/tmp/git-mirrors]: ") or "/tmp/git-mirrors"
    interval = input("GIT_MIRROR_INTERVAL [300]: ") or "300"

    with open(env_path, "w") as f:
        f.write(f'GIT_MIRROR_CONFIG="{config_file}"\n')
        f.write(f'GIT_MIRROR_SYNC_DIR="{sync_dir}"\n')
        f.write(f"GIT_MIRROR_INTERVAL={interval}\n")

    print(f".env file created at {env_path.absolute()}")
    return True


def create_example_config_file(file_path: Path = Path("repos.example.json")) -> bool:
    """Create an example repos.example.json file if it doesn't exist."""
    if file_path.exists():
        print(f"{file_path.name} already exists.")
        return False

    with open(file_path, "w") as f:
        json.dump(EXAMPLE_CONFIG, f, indent=2)
        f.write("\n")

    print(f"Created example config file at {file_path.absolute()}")
    return True


def check_dependencies() -> bool:
    """Check that git and the required Python packages are installed."""
    if shutil.which("git") is None:
        print("Missing dependency: 'git' is required but not installed.")
        return False

    try:
        import pandas  # noqa: F401
        import pydantic  # noqa: F401
        from dotenv import load_dotenv  # noqa: F401
    except ImportError as e:
        print(f"Missing dependency: {e}")
        print("Please install required dependencies:")
        print("pip install -e .")
        return False

    return True


def setup():
    """Run the setup process."""
    print("Setting up git mirror sync environment...\n")

    # Check dependencies
    if not check_dependencies():
        return

    # Create .env file
    create_env_file()

    # Create example config file
    create_example_config_file()

    print("\nSetup complete!")
    print("Next steps:")
    print("1. Edit .env file if needed")
    print("2. Create your repos.json file (or copy the example)")
    print("3. Run the tool: git-mirror-sync")


if __name__ == "__main__":
    setup()
