"""Tests for the orphan and config commands."""

import json
import tomllib
from pathlib import Path

import pytest
from rich.console import Console

from branchsync.cli._commands import ExitCode
from branchsync.cli._commands._config import flatten
from branchsync.repository import FakeRepository
from tests.conftest import CliRunner, console_output


class TestOrphanCommand:
    def test_creates_branch(
        self,
        branchsync_cli: CliRunner,
        patched_repo: FakeRepository,
        tmp_path: Path,
        console: Console,
    ) -> None:
        page = tmp_path / "index.html"
        page.write_bytes(b"<h1>hi</h1>")

        code = branchsync_cli(
            "orphan", "gh-pages", "--message", "Pages", "--file", str(page)
        )

        assert code == ExitCode.SUCCESS
        sha = patched_repo.local["gh-pages"]
        assert patched_repo.commits[sha] == ()
        assert patched_repo.messages[sha] == "Pages"
        assert patched_repo.trees[sha] == {"index.html": b"<h1>hi</h1>"}
        assert "gh-pages" in console_output(console)

    def test_existing_branch_exits_six(
        self, branchsync_cli: CliRunner, patched_repo: FakeRepository
    ) -> None:
        _ = patched_repo

        assert branchsync_cli("orphan", "main") == ExitCode.BRANCH_EXISTS

    def test_invalid_name_exits_one(
        self, branchsync_cli: CliRunner, patched_repo: FakeRepository
    ) -> None:
        assert branchsync_cli("orphan", "bad..name") == ExitCode.FAILURE
        assert patched_repo.mutations() == []

    def test_unreadable_file_exits_one(
        self, branchsync_cli: CliRunner, patched_repo: FakeRepository, tmp_path: Path
    ) -> None:
        code = branchsync_cli("orphan", "docs", "--file", str(tmp_path / "missing"))

        assert code == ExitCode.FAILURE
        assert "docs" not in patched_repo.local


class TestConfigShowCommand:
    def test_toml_output(self, branchsync_cli: CliRunner, console: Console) -> None:
        assert branchsync_cli("config", "show") == ExitCode.SUCCESS

        data = tomllib.loads(console_output(console))
        assert data["sync"]["remote"] == "origin"

    def test_json_output(self, branchsync_cli: CliRunner, console: Console) -> None:
        assert branchsync_cli("config", "show", "--format", "json") == ExitCode.SUCCESS

        data = json.loads(console_output(console))
        assert data["sync"]["active_branch"] == "fast-forward"

    def test_table_output(self, branchsync_cli: CliRunner, console: Console) -> None:
        assert branchsync_cli("config", "show", "--format", "table") == ExitCode.SUCCESS
        assert "sync.remote" in console_output(console)

    def test_explicit_config(
        self, branchsync_cli: CliRunner, console: Console, tmp_path: Path
    ) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[sync]\nremote = "mirror"\n')

        code = branchsync_cli("--config", str(path), "config", "show")

        assert code == ExitCode.SUCCESS
        assert tomllib.loads(console_output(console))["sync"]["remote"] == "mirror"

    def test_missing_explicit_config_exits_four(
        self, branchsync_cli: CliRunner, tmp_path: Path
    ) -> None:
        code = branchsync_cli("--config", str(tmp_path / "nope.toml"), "config", "show")

        assert code == ExitCode.CONFIG_ERROR

    def test_invalid_config_falls_back_to_defaults(
        self, branchsync_cli: CliRunner, tmp_path: Path, console: Console
    ) -> None:
        path = tmp_path / "bad.toml"
        path.write_text('[sync]\nactive_branch = "rebase"\n')

        code = branchsync_cli("--config", str(path), "config", "show")

        assert code == ExitCode.SUCCESS
        assert "Warning" in console_output(console)

    def test_invalid_config_in_strict_mode_exits_four(
        self,
        branchsync_cli: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("BRANCHSYNC_STRICT_CONFIG", "1")
        path = tmp_path / "bad.toml"
        path.write_text('[sync]\nactive_branch = "rebase"\n')

        code = branchsync_cli("--config", str(path), "config", "show")

        assert code == ExitCode.CONFIG_ERROR


class TestFlatten:
    def test_flattens_nested_keys(self) -> None:
        assert flatten({"b": {"c": 1, "a": "x"}, "a": []}) == [
            ("a", "[]"),
            ("b.a", "'x'"),
            ("b.c", "1"),
        ]
