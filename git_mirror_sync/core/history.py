"""
Local history rewrites applied to a snapshot before it is published.

Both rewrites are purely local: there is nothing transient to retry
against, so any failure is reported straight back to the pipeline.
"""

import logging
from typing import List

from git_mirror_sync.core.config import DEFAULT_SIZE_THRESHOLD
from git_mirror_sync.core.exceptions import HistoryRewriteError, MirrorError
from git_mirror_sync.core.git import GitToolchain
from git_mirror_sync.core.snapshot import LocalSnapshot

# Configure logging
logger = logging.getLogger(__name__)


class RootCommitNormalizer:
    """
    Turns the shallow boundary commits of a truncated clone into root commits.

    A destination that never saw the omitted ancestry cannot accept commits
    whose parents it does not have, so boundary commits lose their parent
    links. Their ids change as a result.
    """

    def __init__(self, toolchain: GitToolchain):
        self.toolchain = toolchain

    def normalize(self, snapshot: LocalSnapshot) -> bool:
        """
        Rewrite the snapshot's boundary commits as parentless commits.

        Returns:
            True if the snapshot was shallow and has been rewritten, False if
            there was nothing to do

        Raises:
            HistoryRewriteError: If the rewrite failed
        """
        boundaries = snapshot.shallow_commits()
        if not boundaries:
            logger.debug("  No shallow markers in %s, history left untouched", snapshot.path)
            return False

        logger.info("  Converting %d shallow boundary commit(s) to roots...", len(boundaries))
        try:
            self.toolchain.rewrite_history(snapshot.path, drop_parents=boundaries)
            snapshot.shallow_marker.unlink()
        except (MirrorError, OSError) as e:
            raise HistoryRewriteError(
                "Root-commit conversion failed in %s: %s" % (snapshot.path, e)
            ) from e

        logger.info("  Shallow history converted to root commits.")
        return True


class OversizedObjectFilter:
    """Strips blobs larger than a size threshold from every ref's history."""

    def __init__(self, toolchain: GitToolchain, threshold: int = DEFAULT_SIZE_THRESHOLD):
        """
        Initialize the filter.

        Args:
            toolchain: Git operations used to scan and rewrite
            threshold: Blobs strictly larger than this many bytes are removed
        """
        self.toolchain = toolchain
        self.threshold = threshold

    def find_oversized_paths(self, snapshot: LocalSnapshot) -> List[str]:
        """
        Scan every object reachable from any ref for oversized blobs.

        Returns:
            Sorted, de-duplicated paths of blobs above the threshold
        """
        paths = set()
        for obj in self.toolchain.list_objects(snapshot.path):
            if obj.kind != "blob" or obj.size <= self.threshold:
                continue
            if not obj.path:
                logger.warning(
                    "  Oversized blob %s (%d bytes) has no known path", obj.sha, obj.size
                )
                continue
            logger.info("  Oversized blob: %s (%d bytes)", obj.path, obj.size)
            paths.add(obj.path)
        return sorted(paths)

    def apply(self, snapshot: LocalSnapshot) -> List[str]:
        """
        Remove every revision of each oversized path from history.

        When no blob exceeds the threshold the snapshot is left exactly as it
        was acquired. The object scan names each blob under one path only, so
        a blob stored at several paths surfaces again after the first rewrite;
        scanning and rewriting repeat until a scan comes back empty.

        Returns:
            Sorted paths that were removed (empty if nothing was rewritten)

        Raises:
            HistoryRewriteError: If scanning or rewriting failed, or a removed
                path still holds an oversized blob
        """
        removed: List[str] = []
        while True:
            try:
                paths = self.find_oversized_paths(snapshot)
            except MirrorError as e:
                raise HistoryRewriteError(
                    "Object scan failed in %s: %s" % (snapshot.path, e)
                ) from e

            if not paths:
                break

            # Each round must make progress or the loop would never end
            repeated = sorted(set(paths) & set(removed))
            if repeated:
                raise HistoryRewriteError(
                    "Oversized files survived removal in %s: %s"
                    % (snapshot.path, ", ".join(repeated))
                )

            logger.info("  Removing %d oversized path(s) from history...", len(paths))
            try:
                self.toolchain.rewrite_history(snapshot.path, remove_paths=paths, prune=True)
            except MirrorError as e:
                raise HistoryRewriteError(
                    "Removing oversized files failed in %s: %s" % (snapshot.path, e)
                ) from e
            removed.extend(paths)

        if not removed:
            logger.info("  No objects above %d bytes.", self.threshold)
            return removed

        removed.sort()
        logger.info("  Oversized files removed: %s", ", ".join(removed))
        return removed
