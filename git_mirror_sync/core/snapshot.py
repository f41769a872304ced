"""
Acquisition of fresh local snapshots of source repositories.

A snapshot is a bare mirror clone living under the sync directory. It is
thrown away and re-cloned at the start of every cycle, so nothing a previous
cycle left behind (a partial clone, a half rewritten history) is ever reused.
"""

import hashlib
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List

from git_mirror_sync.core.config import RepositoryMapping
from git_mirror_sync.core.exceptions import AcquisitionError
from git_mirror_sync.core.git import GitToolchain, redact_url
from git_mirror_sync.core.retry import RetryExecutor

# Configure logging
logger = logging.getLogger(__name__)

SHALLOW_MARKER = "shallow"


def snapshot_dir_name(source: str) -> str:
    """
    Derive a stable directory name for a source locator.

    The readable part is the last path component of the locator; a digest
    of the whole locator keeps two sources with the same repository name
    (``a/tools.git`` and ``b/tools.git``) apart.
    """
    stripped = source.rstrip("/")
    name = stripped.replace(":", "/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    name = "".join(c if c.isalnum() or c in "-_." else "_" for c in name) or "repo"
    digest = hashlib.sha1(source.encode("utf-8")).hexdigest()[:10]
    return "%s-%s.git" % (name, digest)


@dataclass(frozen=True)
class LocalSnapshot:
    """A bare clone owned by one mapping's pipeline for one cycle."""

    mapping: RepositoryMapping
    path: Path

    @property
    def shallow_marker(self) -> Path:
        return self.path / SHALLOW_MARKER

    @property
    def is_shallow(self) -> bool:
        """True when the clone still records omitted ancestry."""
        return bool(self.shallow_commits())

    def shallow_commits(self) -> List[str]:
        """Commit ids recorded as shallow boundaries."""
        if not self.shallow_marker.is_file():
            return []
        lines = self.shallow_marker.read_text().splitlines()
        return [line.strip() for line in lines if line.strip()]


def remove_directory(path: Path) -> None:
    """Remove ``path`` recursively; a missing directory is not an error."""
    if path.exists():
        logger.info("Removing local snapshot: %s", path)
        shutil.rmtree(path)


class SnapshotAcquirer:
    """Clones a mapping's source into a freshly created local snapshot."""

    def __init__(self, toolchain: GitToolchain, sync_dir: Path, retry: RetryExecutor):
        """
        Initialize the acquirer.

        Args:
            toolchain: Git operations used for cloning
            sync_dir: Directory holding every mapping's snapshot
            retry: Retry budget for the clone step
        """
        self.toolchain = toolchain
        self.sync_dir = Path(sync_dir)
        self.retry = retry

    def snapshot_path(self, mapping: RepositoryMapping) -> Path:
        return self.sync_dir / snapshot_dir_name(mapping.source)

    def acquire(self, mapping: RepositoryMapping) -> LocalSnapshot:
        """
        Discard any previous snapshot for ``mapping`` and clone a new one.

        Returns:
            The newly created snapshot

        Raises:
            AcquisitionError: If the clone failed on every attempt
        """
        self.sync_dir.mkdir(parents=True, exist_ok=True)
        path = self.snapshot_path(mapping)
        remove_directory(path)

        shallow = mapping.is_truncated
        logger.info(
            "  Cloning %s (%s history) into %s",
            redact_url(mapping.source),
            mapping.history.value,
            path,
        )

        def attempt_clone():
            # A failed attempt may leave a partial clone that blocks the next one
            remove_directory(path)
            self.toolchain.clone(mapping.source, path, shallow=shallow)

        try:
            self.retry.run(attempt_clone, "Clone of %s" % redact_url(mapping.source))
        except Exception as e:  # pylint: disable=broad-exception-caught
            remove_directory(path)
            raise AcquisitionError(
                "Clone failed for %s: %s" % (redact_url(mapping.source), e)
            ) from e

        logger.info("  Clone successful.")
        return LocalSnapshot(mapping=mapping, path=path)
