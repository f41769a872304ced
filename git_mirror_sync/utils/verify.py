"""
Utility module for verifying that destinations match their local snapshots.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from git_mirror_sync.core.config import RepositoryMapping
from git_mirror_sync.core.exceptions import MirrorError
from git_mirror_sync.core.git import GitCli, redact_url
from git_mirror_sync.core.snapshot import snapshot_dir_name

logger = logging.getLogger(__name__)


def compare_refs(local: Dict[str, str], remote: Dict[str, str]) -> Dict[str, List[str]]:
    """
    Compare two ref -> object maps.

    Returns:
        Dict with ``missing`` (only local), ``extra`` (only remote) and
        ``mismatched`` (present on both, different targets) ref names
    """
    return {
        "missing": sorted(set(local) - set(remote)),
        "extra": sorted(set(remote) - set(local)),
        "mismatched": sorted(ref for ref in set(local) & set(remote) if local[ref] != remote[ref]),
    }


class MirrorVerifier:
    def __init__(self, git: GitCli, sync_dir: Path, mappings: List[RepositoryMapping]):
        """
        Initialize verifier with a git client and the mappings to check.

        Args:
            git: Git client used to read local and remote refs
            sync_dir: Directory holding the local snapshots
            mappings: Repository mappings to verify
        """
        self.git = git
        self.sync_dir = Path(sync_dir)
        self.mappings = mappings

        # Results
        self.missing_snapshots: List[RepositoryMapping] = []
        self.unreachable: List[tuple] = []
        self.diverged: List[tuple] = []
        self.success_count = 0

    def verify_mapping(self, mapping: RepositoryMapping) -> Optional[Dict[str, List[str]]]:
        """
        Check one destination against its snapshot.

        Returns:
            The ref differences, or None if the snapshot or destination could
            not be read
        """
        snapshot = self.sync_dir / snapshot_dir_name(mapping.source)
        if not snapshot.is_dir():
            self.missing_snapshots.append(mapping)
            return None

        try:
            local = self.git.list_refs(snapshot)
            remote = self.git.list_remote_refs(mapping.destination)
        except MirrorError as e:
            self.unreachable.append((mapping, str(e)))
            return None

        diff = compare_refs(local, remote)
        if any(diff.values()):
            self.diverged.append((mapping, diff))
        else:
            self.success_count += 1
        return diff

    def verify_all(self) -> None:
        """Verify every mapping."""
        total = len(self.mappings)
        logger.info("Starting verification of %d mappings...", total)

        for index, mapping in enumerate(self.mappings):
            if index % 50 == 0:
                logger.info("Progress: %d/%d", index, total)
            self.verify_mapping(mapping)

    @property
    def has_issues(self) -> bool:
        return bool(self.missing_snapshots or self.unreachable or self.diverged)

    def print_report(self, output_dir: Path = Path(".")) -> None:
        """Log the verification report and export CSV files if anything is wrong."""
        logger.info("===== MIRROR VERIFICATION REPORT =====")
        logger.info("Total mappings: %d", len(self.mappings))
        logger.info("In sync: %d", self.success_count)

        if self.missing_snapshots:
            logger.warning("Mappings without a local snapshot (%d):", len(self.missing_snapshots))
            for mapping in self.missing_snapshots[:10]:
                logger.warning("  - %s", redact_url(str(mapping)))

        if self.unreachable:
            logger.warning("Mappings that could not be read (%d):", len(self.unreachable))
            for mapping, error in self.unreachable[:10]:
                logger.warning("  - %s: %s", redact_url(str(mapping)), error)

        if self.diverged:
            logger.warning("Destinations that differ from their snapshot (%d):", len(self.diverged))
            for mapping, diff in self.diverged[:10]:
                logger.warning(
                    "  - %s: %d missing, %d extra, %d mismatched",
                    redact_url(str(mapping)),
                    len(diff["missing"]),
                    len(diff["extra"]),
                    len(diff["mismatched"]),
                )

        if self.has_issues:
            self.export_reports(output_dir)

    def export_reports(self, output_dir: Path = Path(".")) -> List[Path]:
        """Export detailed reports to CSV files with numerical prefixes."""
        output_dir = Path(output_dir)
        written = []

        if self.missing_snapshots:
            path = output_dir / "01-missing-snapshots.csv"
            pd.DataFrame(
                [(m.source, m.destination) for m in self.missing_snapshots],
                columns=["source", "destination"],
            ).to_csv(path, index=False)
            written.append(path)

        if self.unreachable:
            path = output_dir / "02-unreachable.csv"
            pd.DataFrame(
                [(m.source, m.destination, error) for m, error in self.unreachable],
                columns=["source", "destination", "error"],
            ).to_csv(path, index=False)
            written.append(path)

        if self.diverged:
            rows = []
            for mapping, diff in self.diverged:
                for kind, refs in diff.items():
                    rows.extend((mapping.source, mapping.destination, kind, ref) for ref in refs)
            path = output_dir / "03-diverged-refs.csv"
            pd.DataFrame(rows, columns=["source", "destination", "difference", "ref"]).to_csv(
                path, index=False
            )
            written.append(path)

        for path in written:
            logger.info("Exported %s", path)
        return written
