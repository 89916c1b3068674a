"""Shared test fixtures for branchsync tests."""

import io
import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console

CliRunner = Callable[..., int]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate tests from the user's environment and config files.

    Removes every BRANCHSYNC_* variable, points the user config at an empty
    temporary directory and sends CLI logs to a temporary file.
    """
    for key in list(os.environ):
        if key.startswith("BRANCHSYNC_"):
            monkeypatch.delenv(key)

    user_config = tmp_path / "user-config" / "config.toml"
    monkeypatch.setattr(
        "branchsync.config._discovery.get_user_config_path", lambda: user_config
    )

    log_file = tmp_path / "logs" / "cli.log"
    monkeypatch.setenv("BRANCHSYNC_LOGGING__FILE", str(log_file))
    return user_config


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer without styling."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


def console_output(console: Console) -> str:
    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()


# =============================================================================
# Real Git helpers
# =============================================================================


def run_git(cwd: Path, *args: str) -> str:
    """Run git in cwd and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        check=True,
        text=True,
        env={
            **os.environ,
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
            "GIT_CONFIG_NOSYSTEM": "1",
        },
    )
    return result.stdout.strip()


@dataclass(frozen=True, slots=True)
class GitRemoteSetup:
    """An upstream repository, a bare origin and a clone of it.

    Attributes:
        upstream: Working repository used to create commits and push them.
        origin: Bare repository acting as the remote.
        clone: Repository under test, with ``origin`` configured.
    """

    upstream: Path
    origin: Path
    clone: Path

    def commit(self, message: str, *, branch: str = "main") -> str:
        """Create a commit on branch in upstream and push it to origin."""
        run_git(self.upstream, "checkout", "-q", branch)
        path = self.upstream / f"{branch.replace('/', '_')}.txt"
        with path.open("a") as f:
            f.write(f"{message}\n")
        run_git(self.upstream, "add", path.name)
        run_git(self.upstream, "commit", "-q", "-m", message)
        run_git(self.upstream, "push", "-q", "origin", branch)
        return run_git(self.upstream, "rev-parse", "HEAD")

    def create_remote_branch(self, branch: str, *, start: str = "main") -> str:
        run_git(self.upstream, "checkout", "-q", "-b", branch, start)
        return self.commit(f"start {branch}", branch=branch)

    def delete_remote_branch(self, branch: str) -> None:
        run_git(self.upstream, "checkout", "-q", "main")
        run_git(self.upstream, "push", "-q", "origin", "--delete", branch)

    def clone_sha(self, ref: str) -> str:
        return run_git(self.clone, "rev-parse", ref)

    def clone_branches(self) -> set[str]:
        output = run_git(
            self.clone, "for-each-ref", "--format=%(refname:short)", "refs/heads/"
        )
        return set(output.splitlines())


@pytest.fixture
def git_remote(tmp_path: Path) -> GitRemoteSetup:
    """Create upstream, bare origin and clone repositories with one commit."""
    upstream = tmp_path / "upstream"
    origin = tmp_path / "origin.git"
    clone = tmp_path / "clone"

    upstream.mkdir()
    run_git(upstream, "init", "-q", "-b", "main")
    run_git(tmp_path, "init", "-q", "--bare", "-b", "main", str(origin))
    run_git(upstream, "remote", "add", "origin", str(origin))

    setup = GitRemoteSetup(upstream=upstream, origin=origin, clone=clone)
    (upstream / "README.md").write_text("hello\n")
    run_git(upstream, "add", "README.md")
    run_git(upstream, "commit", "-q", "-m", "initial")
    run_git(upstream, "push", "-q", "origin", "main")

    run_git(tmp_path, "clone", "-q", str(origin), str(clone))
    return setup

