"""Core functionality for the git mirror sync tool."""

from git_mirror_sync.core.config import (
    HistoryMode,
    RepositoryMapping,
    SyncConfig,
    get_env_variable,
    load_config,
    load_repository_mappings,
)
from git_mirror_sync.core.exceptions import (
    AcquisitionError,
    ConfigError,
    GitCommandError,
    HistoryRewriteError,
    MirrorError,
    PublishError,
    SyncError,
)
from git_mirror_sync.core.git import ContentObject, GitCli, GitToolchain
from git_mirror_sync.core.history import OversizedObjectFilter, RootCommitNormalizer
from git_mirror_sync.core.mirror import CycleReport, MirrorService, SyncOutcome, SyncStage
from git_mirror_sync.core.publisher import MirrorPublisher
from git_mirror_sync.core.retry import RetryExecutor
from git_mirror_sync.core.snapshot import LocalSnapshot, SnapshotAcquirer

__all__ = [
    "MirrorError",
    "ConfigError",
    "GitCommandError",
    "SyncError",
    "AcquisitionError",
    "HistoryRewriteError",
    "PublishError",
    "HistoryMode",
    "RepositoryMapping",
    "SyncConfig",
    "get_env_variable",
    "load_config",
    "load_repository_mappings",
    "ContentObject",
    "GitCli",
    "GitToolchain",
    "RetryExecutor",
    "LocalSnapshot",
    "SnapshotAcquirer",
    "RootCommitNormalizer",
    "OversizedObjectFilter",
    "MirrorPublisher",
    "CycleReport",
    "MirrorService",
    "SyncOutcome",
    "SyncStage",
]
