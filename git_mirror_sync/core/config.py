"""
Configuration module for the git mirror sync project.

This module provides configuration classes and validation for the project.
It uses Pydantic for configuration validation, dotenv for loading
environment variables and pandas for reading CSV mapping files.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from git_mirror_sync.core.exceptions import ConfigError

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

DEFAULT_SYNC_DIR = Path("/tmp/git-mirrors")
DEFAULT_INTERVAL = 300
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_SIZE_THRESHOLD = 100 * 1024 * 1024

CSV_COLUMNS = ["source", "destination", "history"]


class HistoryMode(str, Enum):
    """How much history a snapshot carries."""

    FULL = "full"
    TRUNCATED = "truncated"


class RepositoryMapping(BaseModel):
    """A source repository and the destination kept as its replica."""

    model_config = ConfigDict(frozen=True)

    source: str
    destination: str
    history: HistoryMode = HistoryMode.FULL

    @field_validator("source", "destination")
    @classmethod
    def validate_locator(cls, v):
        """Validates that a repository locator is non-empty."""
        v = v.strip()
        if not v:
            raise ValueError("repository locator must be non-empty")
        return v

    @model_validator(mode="after")
    def validate_distinct(self):
        """Rejects a mapping that would push a repository onto itself."""
        if self.source == self.destination:
            raise ValueError("source and destination are identical: %r" % self.source)
        return self

    @property
    def is_truncated(self) -> bool:
        return self.history == HistoryMode.TRUNCATED

    def __str__(self) -> str:
        return "%s -> %s" % (self.source, self.destination)


class SyncConfig(BaseModel):
    """Overall configuration for the sync loop."""

    config_file: Path
    sync_dir: Path = DEFAULT_SYNC_DIR
    interval: int = DEFAULT_INTERVAL
    clone_retries: int = DEFAULT_RETRIES
    push_retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    size_threshold: int = DEFAULT_SIZE_THRESHOLD
    mappings: List[RepositoryMapping] = []

    @field_validator("config_file")
    @classmethod
    def validate_config_file(cls, v):
        """Validates that the mapping file exists."""
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v):
        if v < 0:
            raise ValueError("interval must not be negative")
        return v

    @field_validator("clone_retries", "push_retries")
    @classmethod
    def validate_retries(cls, v):
        if v < 1:
            raise ValueError("retry budget must be at least 1")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v):
        if v < 0:
            raise ValueError("retry delay must not be negative")
        return v

    @field_validator("size_threshold")
    @classmethod
    def validate_size_threshold(cls, v):
        if v <= 0:
            raise ValueError("size threshold must be positive")
        return v


def get_env_variable(name: str, required: bool = False) -> Optional[str]:
    """
    Retrieve environment variable. Exit if required and missing.

    Args:
        name: Name of the environment variable
        required: Whether the variable is required

    Returns:
        Value of the environment variable or None if not required and not found

    Raises:
        ConfigError: If the variable is required but not found
    """
    value = os.getenv(name)

    if required and not value:
        logger.error("Missing required environment variable: %s", name)
        raise ConfigError(f"Missing required environment variable: {name}")

    return value


def _build_mappings(records: List[Dict[str, Any]], origin: Path) -> List[RepositoryMapping]:
    """Validate raw mapping records, rejecting the whole file on the first bad one."""
    mappings = []
    for index, record in enumerate(records):
        try:
            mappings.append(RepositoryMapping.model_validate(record))
        except ValidationError as e:
            logger.error("Invalid mapping at index %d in %s: %s", index, origin, e)
            raise ConfigError(f"Invalid mapping at index {index} in {origin}: {e}") from e

    if not mappings:
        logger.error("No repository mappings found in %s", origin)
        raise ConfigError(f"No repository mappings found in {origin}")

    return mappings


def _read_json_records(path: Path) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as file:
            document = json.load(file)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("repos"), list):
        raise ConfigError(f"Config file {path} must contain a 'repos' list")

    records = []
    for index, entry in enumerate(document["repos"]):
        if not isinstance(entry, dict):
            raise ConfigError(f"Invalid mapping at index {index} in {path}: expected an object")
        records.append(entry)
    return records


def _read_csv_records(path: Path) -> List[Dict[str, Any]]:
    """
    Read mappings from a headerless CSV file.

    Columns are source, destination and an optional history mode. Lines
    starting with ``#`` are ignored.
    """
    try:
        df = pd.read_csv(
            path,
            header=None,
            names=CSV_COLUMNS,
            comment="#",
            dtype=str,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except (OSError, pd.errors.ParserError) as e:
        raise ConfigError(f"Failed to read mapping file {path}: {e}") from e

    records = []
    for _, row in df.iterrows():
        record = {
            "source": row["source"] if pd.notna(row["source"]) else "",
            "destination": row["destination"] if pd.notna(row["destination"]) else "",
        }
        if pd.notna(row["history"]) and row["history"].strip():
            record["history"] = row["history"].strip()
        records.append(record)
    return records


def load_repository_mappings(path: Path) -> List[RepositoryMapping]:
    """
    Load and validate repository mappings from a JSON or CSV file.

    JSON files hold ``{"repos": [{"source": ..., "destination": ...,
    "history": "full"}]}``; any other suffix is read as CSV.

    Returns:
        Ordered list of validated mappings

    Raises:
        ConfigError: If the file is unreadable, any record is invalid or no
            mappings are defined
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    if path.suffix.lower() == ".json":
        records = _read_json_records(path)
    else:
        records = _read_csv_records(path)

    return _build_mappings(records, path)


def load_config(
    config_file: str,
    sync_dir: Optional[str] = None,
    interval: Optional[int] = None,
    clone_retries: Optional[int] = None,
    push_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    size_threshold: Optional[int] = None,
) -> SyncConfig:
    """
    Build a validated SyncConfig, including its repository mappings.

    Arguments left as None fall back to the model defaults.

    Raises:
        ConfigError: If any setting or mapping is invalid
    """
    if not config_file:
        raise ConfigError("A mapping config file is required")

    overrides = {
        "sync_dir": sync_dir,
        "interval": interval,
        "clone_retries": clone_retries,
        "push_retries": push_retries,
        "retry_delay": retry_delay,
        "size_threshold": size_threshold,
    }
    settings = {key: value for key, value in overrides.items() if value is not None}

    try:
        config = SyncConfig(config_file=Path(config_file), **settings)
    except ValidationError as e:
        logger.error("Configuration validation error: %s", e)
        raise ConfigError(f"Configuration validation error: {e}") from e

    return config.model_copy(update={"mappings": load_repository_mappings(config.config_file)})
