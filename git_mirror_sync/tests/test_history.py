"""
Tests for root-commit normalization and oversized-object filtering.
"""

import pytest
from conftest import mapping

from git_mirror_sync.core.exceptions import HistoryRewriteError
from git_mirror_sync.core.git import ContentObject
from git_mirror_sync.core.history import OversizedObjectFilter, RootCommitNormalizer
from git_mirror_sync.core.snapshot import LocalSnapshot

MIB = 1024 * 1024
SOURCE = "git@a:org/app.git"


@pytest.fixture
def snapshot(fake_git, tmp_path):
    path = tmp_path / "app.git"
    fake_git.clone(SOURCE, path)
    fake_git.calls.clear()
    return LocalSnapshot(mapping(SOURCE, "git@b:org/app.git"), path)


def test_normalizer_skips_snapshot_without_shallow_marker(fake_git, snapshot):
    assert RootCommitNormalizer(fake_git).normalize(snapshot) is False
    assert fake_git.ops("rewrite_history") == []


def test_normalizer_drops_boundary_parents_and_removes_marker(fake_git, snapshot):
    boundaries = ["a" * 40, "b" * 40]
    snapshot.shallow_marker.write_text("\n".join(boundaries) + "\n")

    assert RootCommitNormalizer(fake_git).normalize(snapshot) is True

    assert fake_git.ops("rewrite_history") == [
        ("rewrite_history", snapshot.path, boundaries, [], False)
    ]
    assert not snapshot.shallow_marker.exists()
    assert not snapshot.is_shallow


def test_normalizer_failure_is_a_rewrite_error(fake_git, snapshot):
    snapshot.shallow_marker.write_text("a" * 40 + "\n")
    fake_git.rewrite_failures.add(SOURCE)

    with pytest.raises(HistoryRewriteError, match="Root-commit conversion failed"):
        RootCommitNormalizer(fake_git).normalize(snapshot)


def test_filter_collects_only_blobs_strictly_above_threshold(fake_git, snapshot):
    fake_git.objects[SOURCE] = [
        ContentObject("c1", "commit", 500 * MIB),
        ContentObject("t1", "tree", 200 * MIB, "assets"),
        ContentObject("b1", "blob", 150 * MIB, "assets/video.mp4"),
        ContentObject("b2", "blob", 120 * MIB, "assets/video.mp4"),
        ContentObject("b3", "blob", 100 * MIB, "exactly-threshold.bin"),
        ContentObject("b4", "blob", 101 * MIB, "data/dump.sql"),
        ContentObject("b5", "blob", 1024, "README.md"),
        ContentObject("b6", "blob", 300 * MIB, ""),
    ]

    paths = OversizedObjectFilter(fake_git).find_oversized_paths(snapshot)

    assert paths == ["assets/video.mp4", "data/dump.sql"]


def test_filter_with_nothing_oversized_leaves_history_untouched(fake_git, snapshot):
    fake_git.objects[SOURCE] = [ContentObject("b1", "blob", 10, "README.md")]

    assert OversizedObjectFilter(fake_git).apply(snapshot) == []
    assert fake_git.ops("rewrite_history") == []


def test_filter_rewrites_and_prunes_oversized_paths(fake_git, snapshot):
    fake_git.objects[SOURCE] = [
        ContentObject("b1", "blob", 150 * MIB, "big.iso"),
        ContentObject("b2", "blob", 10, "README.md"),
    ]

    assert OversizedObjectFilter(fake_git).apply(snapshot) == ["big.iso"]
    assert fake_git.ops("rewrite_history") == [
        ("rewrite_history", snapshot.path, [], ["big.iso"], True)
    ]


def test_filter_is_idempotent(fake_git, snapshot):
    fake_git.objects[SOURCE] = [
        ContentObject("b1", "blob", 150 * MIB, "big.iso"),
        ContentObject("b2", "blob", 10, "README.md"),
    ]
    object_filter = OversizedObjectFilter(fake_git)

    object_filter.apply(snapshot)
    assert object_filter.apply(snapshot) == []
    assert len(fake_git.ops("rewrite_history")) == 1
    assert [obj.path for obj in fake_git.objects[SOURCE]] == ["README.md"]


def test_filter_rewrite_failure_is_a_rewrite_error(fake_git, snapshot):
    fake_git.objects[SOURCE] = [ContentObject("b1", "blob", 150 * MIB, "big.iso")]
    fake_git.rewrite_failures.add(SOURCE)

    with pytest.raises(HistoryRewriteError, match="oversized"):
        OversizedObjectFilter(fake_git).apply(snapshot)


def test_filter_removes_every_path_of_a_shared_blob(fake_git, snapshot):
    fake_git.objects[SOURCE] = [
        ContentObject("b1", "blob", 150 * MIB, "a/big.bin"),
        ContentObject("b1", "blob", 150 * MIB, "b/copy.bin"),
        ContentObject("b2", "blob", 10, "README.md"),
    ]
    object_filter = OversizedObjectFilter(fake_git)

    assert object_filter.apply(snapshot) == ["a/big.bin", "b/copy.bin"]
    assert [call[3] for call in fake_git.ops("rewrite_history")] == [
        ["a/big.bin"],
        ["b/copy.bin"],
    ]
    assert object_filter.apply(snapshot) == []
    assert len(fake_git.ops("rewrite_history")) == 2


def test_filter_fails_when_a_removed_path_is_still_oversized(fake_git, snapshot):
    fake_git.objects[SOURCE] = [ContentObject("b1", "blob", 150 * MIB, "big.iso")]

    def rewrite_without_effect(path, drop_parents=(), remove_paths=(), prune=False):
        fake_git.calls.append(("rewrite_history", path, [], list(remove_paths), prune))

    fake_git.rewrite_history = rewrite_without_effect

    with pytest.raises(HistoryRewriteError, match="survived removal"):
        OversizedObjectFilter(fake_git).apply(snapshot)
    assert len(fake_git.ops("rewrite_history")) == 1


def test_filter_respects_custom_threshold(fake_git, snapshot):
    fake_git.objects[SOURCE] = [
        ContentObject("b1", "blob", 2048, "medium.bin"),
        ContentObject("b2", "blob", 1024, "small.bin"),
    ]

    assert OversizedObjectFilter(fake_git, threshold=1024).find_oversized_paths(snapshot) == [
        "medium.bin"
    ]
