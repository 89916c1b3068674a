from pathlib import Path

import pytest
from pytest_mock import MockerFixture
from rich.console import Console

from branchsync.cli import create_app
from branchsync.repository import FakeRepository
from tests.conftest import CliRunner


@pytest.fixture
def patched_repo(mocker: MockerFixture, fake_repo: FakeRepository) -> FakeRepository:
    """Make every command open fake_repo instead of a real repository."""
    _ = mocker.patch(
        "branchsync.cli._commands._shared.GitRepository", return_value=fake_repo
    )
    return fake_repo


@pytest.fixture
def branchsync_cli(console: Console, tmp_path: Path) -> CliRunner:
    """Run the CLI and return its exit code (0 if no SystemExit)."""
    app = create_app(console=console, error_console=console, exit_on_error=False)

    def _run(*args: str) -> int:
        try:
            app.meta(["--repo", str(tmp_path), *args])
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        return 0

    return _run
