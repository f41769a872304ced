"""
Shared fixtures: an in-memory git toolchain and helpers for real git repositories.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List

import pytest

from git_mirror_sync.core.config import RepositoryMapping, SyncConfig
from git_mirror_sync.core.exceptions import GitCommandError
from git_mirror_sync.core.git import ContentObject, GitToolchain

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class RecordingSleep:
    """Stand-in for time.sleep that only records the requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeToolchain(GitToolchain):
    """GitToolchain that fakes clones as plain directories and records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.clone_failures: Dict[str, int] = {}
        self.push_failures: Dict[str, int] = {}
        self.rewrite_failures: set = set()
        self.objects: Dict[str, List[ContentObject]] = {}
        self.sources: Dict[Path, str] = {}
        self.pushed: Dict[str, Path] = {}

    def clone(self, source, path, shallow=False):
        self.calls.append(("clone", source, Path(path), shallow))
        if self.clone_failures.get(source, 0) > 0:
            self.clone_failures[source] -= 1
            # Leave a partial clone behind like an interrupted transfer would
            Path(path).mkdir(parents=True, exist_ok=True)
            (Path(path) / "partial").write_text("")
            raise GitCommandError(["git", "clone", source], 128, "connection reset")
        Path(path).mkdir(parents=True)
        (Path(path) / "HEAD").write_text("ref: refs/heads/main\n")
        if shallow:
            (Path(path) / "shallow").write_text("1111111111111111111111111111111111111111\n")
        self.sources[Path(path)] = source

    def list_objects(self, path):
        self.calls.append(("list_objects", Path(path)))
        # Like rev-list, report each object once, under the first path it was seen at
        seen, listed = set(), []
        for obj in self.objects.get(self.sources[Path(path)], []):
            if obj.sha not in seen:
                seen.add(obj.sha)
                listed.append(obj)
        return listed

    def rewrite_history(self, path, drop_parents=(), remove_paths=(), prune=False):
        drop_parents, remove_paths = list(drop_parents), list(remove_paths)
        self.calls.append(("rewrite_history", Path(path), drop_parents, remove_paths, prune))
        source = self.sources[Path(path)]
        if source in self.rewrite_failures:
            raise GitCommandError(["git", "filter-branch"], 1, "rewrite failed")
        if remove_paths:
            self.objects[source] = [
                obj for obj in self.objects.get(source, []) if obj.path not in remove_paths
            ]

    def push_mirror(self, path, destination):
        self.calls.append(("push_mirror", Path(path), destination))
        if self.push_failures.get(destination, 0) > 0:
            self.push_failures[destination] -= 1
            raise GitCommandError(["git", "push", "--mirror"], 128, "timed out")
        self.pushed[destination] = Path(path)

    def ops(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def fake_git():
    return FakeToolchain()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_config(tmp_path):
    """Build a SyncConfig for the given mappings with a throwaway config file."""

    def _make(*mappings, **overrides):
        config_file = tmp_path / "repos.json"
        config_file.write_text('{"repos": []}')
        settings = {
            "config_file": config_file,
            "sync_dir": tmp_path / "mirrors",
            "interval": 60,
            "retry_delay": 5,
            "mappings": list(mappings),
        }
        settings.update(overrides)
        return SyncConfig(**settings)

    return _make


def mapping(source, destination, history="full"):
    return RepositoryMapping(source=source, destination=destination, history=history)


# Real git helpers

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_COMMITTER_NAME": "Test Committer",
    "GIT_COMMITTER_EMAIL": "committer@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(*args, cwd=None) -> str:
    env = os.environ.copy()
    env.update(GIT_IDENTITY)
    env["HOME"] = str(cwd or os.getcwd())
    result = subprocess.run(
        ["git"] + list(args),
        cwd=str(cwd) if cwd else None,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        universal_newlines=True,
        check=True,
    )
    return result.stdout


def refs_of(repo: Path) -> Dict[str, str]:
    out = subprocess.run(
        ["git", "show-ref"],
        cwd=str(repo),
        stdout=subprocess.PIPE,
        universal_newlines=True,
    ).stdout
    return {ref: sha for sha, ref in (line.split() for line in out.splitlines())}


class SourceRepo:
    """A bare source repository populated through a scratch work tree."""

    def __init__(self, root: Path):
        self.bare = root / "source.git"
        self.work = root / "work"
        git("init", "--bare", "--quiet", str(self.bare), cwd=root)
        git("init", "--quiet", str(self.work), cwd=root)
        git("checkout", "--quiet", "-b", "main", cwd=self.work)
        git("remote", "add", "origin", str(self.bare), cwd=self.work)

    @property
    def url(self) -> str:
        return self.bare.resolve().as_uri()

    def commit(self, files: Dict[str, bytes], message: str) -> str:
        for name, content in files.items():
            target = self.work / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            git("add", name, cwd=self.work)
        git("commit", "--quiet", "-m", message, cwd=self.work)
        return git("rev-parse", "HEAD", cwd=self.work).strip()

    def branch(self, name: str, start: str = "main") -> None:
        git("checkout", "--quiet", "-b", name, start, cwd=self.work)

    def checkout(self, name: str) -> None:
        git("checkout", "--quiet", name, cwd=self.work)

    def push(self) -> None:
        git("push", "--quiet", "--all", "origin", cwd=self.work)
        git("push", "--quiet", "--tags", "origin", cwd=self.work)


@pytest.fixture
def source_repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return SourceRepo(tmp_path)


@pytest.fixture
def destination_repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    path = tmp_path / "destination.git"
    git("init", "--bare", "--quiet", str(path), cwd=tmp_path)
    return path
