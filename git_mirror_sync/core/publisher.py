"""
Force-publishing a snapshot's complete ref set to its destination.
"""

import logging

from git_mirror_sync.core.exceptions import PublishError
from git_mirror_sync.core.git import GitToolchain, redact_url
from git_mirror_sync.core.retry import RetryExecutor
from git_mirror_sync.core.snapshot import LocalSnapshot

logger = logging.getLogger(__name__)


class MirrorPublisher:
    """
    Replaces a destination's refs with those of a local snapshot.

    Every snapshot ref is force-set on the destination and every ref only the
    destination has is deleted. Commits pushed straight to the destination
    are lost on the next cycle.
    """

    def __init__(self, toolchain: GitToolchain, retry: RetryExecutor):
        self.toolchain = toolchain
        self.retry = retry

    def publish(self, snapshot: LocalSnapshot) -> None:
        """
        Mirror-push the snapshot to its mapping's destination.

        Raises:
            PublishError: If the push failed on every attempt
        """
        destination = snapshot.mapping.destination
        logger.info("  Pushing to destination %s...", redact_url(destination))
        try:
            self.retry.run(
                lambda: self.toolchain.push_mirror(snapshot.path, destination),
                "Push to %s" % redact_url(destination),
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise PublishError("Push failed for %s: %s" % (redact_url(destination), e)) from e
        logger.info("  Push successful.")
