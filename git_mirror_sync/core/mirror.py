"""
Core module for git mirror sync functionality.
Runs the per-repository sync pipeline and the endless sync cycle around it.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from git_mirror_sync.core.config import RepositoryMapping, SyncConfig
from git_mirror_sync.core.exceptions import MirrorError
from git_mirror_sync.core.git import GitCli, GitToolchain, redact_url
from git_mirror_sync.core.history import OversizedObjectFilter, RootCommitNormalizer
from git_mirror_sync.core.publisher import MirrorPublisher
from git_mirror_sync.core.retry import RetryExecutor
from git_mirror_sync.core.snapshot import SnapshotAcquirer

# Configure logging
logger = logging.getLogger(__name__)


class SyncStage(str, Enum):
    """Pipeline stages, in the order they run."""

    ACQUIRE = "acquire"
    NORMALIZE = "normalize"
    FILTER = "filter"
    PUBLISH = "publish"


@dataclass
class SyncOutcome:
    """Result of one mapping's pipeline in one cycle."""

    mapping: RepositoryMapping
    success: bool
    failed_stage: Optional[SyncStage] = None
    error: Optional[str] = None
    removed_paths: List[str] = field(default_factory=list)


@dataclass
class CycleReport:
    """Accumulates the outcomes of a single sync cycle."""

    cycle: int = 1
    outcomes: List[SyncOutcome] = field(default_factory=list)

    def record(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> List[SyncOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]


class MirrorService:
    """Core service keeping destinations as replicas of their sources."""

    def __init__(
        self,
        config: SyncConfig,
        toolchain: Optional[GitToolchain] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize with sync configuration.

        Args:
            config: Validated configuration, mappings included
            toolchain: Git operations; defaults to the git command-line client
            sleep: Blocking wait used for retry delays and between cycles
        """
        self.config = config
        self.toolchain = toolchain or GitCli()
        self.sleep = sleep

        # Clone and push have independent budgets but share the delay
        clone_retry = RetryExecutor(config.clone_retries, config.retry_delay, sleep=sleep)
        push_retry = RetryExecutor(config.push_retries, config.retry_delay, sleep=sleep)

        self.acquirer = SnapshotAcquirer(self.toolchain, config.sync_dir, clone_retry)
        self.normalizer = RootCommitNormalizer(self.toolchain)
        self.filter = OversizedObjectFilter(self.toolchain, config.size_threshold)
        self.publisher = MirrorPublisher(self.toolchain, push_retry)

    def sync_repository(self, mapping: RepositoryMapping) -> SyncOutcome:
        """
        Run the full pipeline for one mapping.

        Stages run strictly in order and the first failing stage ends the
        pipeline for this cycle. No exception escapes: failures are reported
        through the returned outcome.
        """
        logger.info("--- Syncing: %s ---", redact_url(mapping.source))
        logger.info("  Source:      %s", redact_url(mapping.source))
        logger.info("  Destination: %s", redact_url(mapping.destination))

        stage = SyncStage.ACQUIRE
        removed_paths: List[str] = []
        try:
            snapshot = self.acquirer.acquire(mapping)

            stage = SyncStage.NORMALIZE
            if snapshot.is_shallow:
                self.normalizer.normalize(snapshot)

            stage = SyncStage.FILTER
            removed_paths = self.filter.apply(snapshot)

            stage = SyncStage.PUBLISH
            self.publisher.publish(snapshot)
        except MirrorError as e:
            logger.error(
                "  Sync FAILED for %s at stage %s: %s", redact_url(mapping.source), stage.value, e
            )
            return SyncOutcome(mapping, False, failed_stage=stage, error=str(e))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception(
                "  Unexpected error syncing %s at stage %s",
                redact_url(mapping.source),
                stage.value,
            )
            return SyncOutcome(mapping, False, failed_stage=stage, error=str(e))

        logger.info("  Sync complete for %s.", redact_url(mapping.source))
        return SyncOutcome(mapping, True, removed_paths=removed_paths)

    def run_cycle(self, cycle: int = 1) -> CycleReport:
        """Sync every mapping once, in configured order."""
        logger.info("========== Sync cycle %d starting ==========", cycle)

        report = CycleReport(cycle=cycle)
        for mapping in self.config.mappings:
            report.record(self.sync_repository(mapping))

        logger.info("========== Sync cycle %d complete ==========", cycle)
        logger.info(
            "  Succeeded: %d  |  Failed: %d  |  Total: %d",
            report.succeeded,
            report.failed,
            report.total,
        )
        self._log_errors_summary(report)
        return report

    def run_forever(self, max_cycles: Optional[int] = None) -> List[CycleReport]:
        """
        Repeat sync cycles, sleeping ``config.interval`` seconds between them.

        Args:
            max_cycles: Stop after this many cycles; None loops until the
                process is terminated

        Returns:
            The report of every cycle that ran
        """
        self._log_banner()

        reports = []
        cycle = 1
        while True:
            report = self.run_cycle(cycle)
            # An unbounded loop never returns, so only bounded runs keep reports
            if max_cycles is not None:
                reports.append(report)
            if max_cycles is not None and cycle >= max_cycles:
                break
            logger.info("  Next cycle in %ds...", self.config.interval)
            self.sleep(self.config.interval)
            cycle += 1
        return reports

    def _log_banner(self) -> None:
        logger.info("==========================================")
        logger.info(" One-Way Git Mirror Sync")
        logger.info("==========================================")
        logger.warning("DESTRUCTIVE MIRROR: Destination repos are force-pushed each cycle.")
        logger.warning("Any commits made directly to a destination WILL BE OVERWRITTEN.")
        logger.info("==========================================")
        logger.info("Sync directory:  %s", self.config.sync_dir)
        logger.info("Sleep interval:  %ds", self.config.interval)
        logger.info("Config file:     %s", self.config.config_file)
        logger.info("Repo mappings:   %d", len(self.config.mappings))

    def _log_errors_summary(self, report: CycleReport) -> None:
        """Logs every failure of the cycle in a formatted way."""
        if not report.failures:
            return

        logger.warning("Sync Errors Summary:")
        for idx, outcome in enumerate(report.failures, 1):
            logger.warning(
                "  Error #%d: %s -> %s [%s] %s",
                idx,
                redact_url(outcome.mapping.source),
                redact_url(outcome.mapping.destination),
                outcome.failed_stage.value if outcome.failed_stage else "unknown",
                outcome.error,
            )
