"""Tests for Config loading and precedence."""

from pathlib import Path

import pytest

from branchsync.config import (
    Config,
    ConfigLoadError,
    ConfigSourceName,
    ConfigValidationError,
    LogFormat,
    LogLevel,
    discover_sources,
    find_repository_root,
    safe_load_config,
)
from branchsync.reconcile import ActiveBranchPolicy


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """A directory that looks like a repository root (for discovery)."""
    from dulwich.repo import Repo

    root = tmp_path / "repo"
    root.mkdir()
    Repo.init(str(root)).close()
    return root


class TestFromDict:
    def test_defaults(self) -> None:
        config = Config.from_dict({})

        assert config.sync.remote == "origin"
        assert config.sync.fetch is True
        assert config.sync.prune is True
        assert config.sync.fetch_timeout == 60.0
        assert config.sync.active_branch is ActiveBranchPolicy.FAST_FORWARD
        assert config.sync.protected_branches == ()
        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.JSON

    def test_values_override_defaults(self) -> None:
        config = Config.from_dict(
            {"sync": {"active_branch": "skip", "protected_branches": ["main"]}}
        )

        assert config.sync.active_branch is ActiveBranchPolicy.SKIP
        assert config.sync.protected_branches == ("main",)
        assert config.sync.remote == "origin"

    def test_invalid_policy_raises(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            Config.from_dict({"sync": {"active_branch": "rebase"}})

        assert exc_info.value.key == "sync.active_branch"
        assert exc_info.value.value == "rebase"

    def test_non_positive_timeout_raises(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            Config.from_dict({"sync": {"fetch_timeout": 0}})

        assert exc_info.value.key == "sync.fetch_timeout"

    def test_unknown_keys_are_ignored(self) -> None:
        config = Config.from_dict({"extra": {"x": 1}})
        assert config.get("extra.x") == 1


class TestAccessors:
    def test_get_dotted_key(self) -> None:
        config = Config.from_dict({})
        assert config.get("sync.remote") == "origin"
        assert config.get("sync.nope", "fallback") == "fallback"
        assert config.get("sync.remote.deeper") is None

    def test_to_toml_round_trips_sync_section(self) -> None:
        import tomllib

        config = Config.from_dict({"sync": {"remote": "upstream"}})

        data = tomllib.loads(config.to_toml())

        assert data["sync"]["remote"] == "upstream"
        assert data["logging"]["level"] == "info"

    def test_to_reconcile_options(self) -> None:
        config = Config.from_dict(
            {
                "sync": {
                    "remote": "upstream",
                    "fetch": False,
                    "fetch_timeout": 5,
                    "protected_branches": ["main", "release"],
                }
            }
        )

        options = config.to_reconcile_options(dry_run=True)

        assert options.remote == "upstream"
        assert options.fetch is False
        assert options.fetch_timeout == 5.0
        assert options.dry_run is True
        assert options.protected_branches == frozenset({"main", "release"})


class TestLoad:
    def test_precedence(
        self,
        repo_root: Path,
        isolated_env: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        isolated_env.parent.mkdir(parents=True)
        isolated_env.write_text(
            '[sync]\nremote = "user"\nprune = false\nfetch_timeout = 10.0\n'
        )
        (repo_root / ".branchsync.toml").write_text(
            '[sync]\nremote = "project"\nfetch_timeout = 20.0\n'
        )
        monkeypatch.setenv("BRANCHSYNC_SYNC__FETCH_TIMEOUT", "30.0")

        config = Config.load(
            repository_root=repo_root,
            cli_overrides={"logging": {"level": "debug"}},
        )

        assert config.sync.remote == "project"
        assert config.sync.prune is False
        assert config.sync.fetch_timeout == 30.0
        assert config.logging.level is LogLevel.DEBUG
        assert [s.name for s in config.sources] == [
            ConfigSourceName.CLI,
            ConfigSourceName.ENV,
            ConfigSourceName.PROJECT,
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]

    def test_without_repository_skips_project_source(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "branchsync.config._discovery.find_repository_root", lambda: None
        )

        sources = discover_sources(None, include_env=False)

        assert [s.name for s in sources] == [
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]

    def test_find_repository_root(self, repo_root: Path) -> None:
        nested = repo_root / "a" / "b"
        nested.mkdir(parents=True)

        assert find_repository_root(nested) == repo_root.resolve()

    def test_find_repository_root_outside_repo(self, tmp_path: Path) -> None:
        outside = tmp_path / "plain"
        outside.mkdir()

        found = find_repository_root(outside)

        assert found is None or outside.resolve().is_relative_to(found)


class TestSafeLoadConfig:
    def test_invalid_file_falls_back_to_defaults(
        self, repo_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (repo_root / ".branchsync.toml").write_text("[sync\n")

        config, error = safe_load_config(repository_root=repo_root)

        assert error is not None
        assert config.sync.remote == "origin"
        assert "Warning" in capsys.readouterr().err

    def test_strict_mode_raises(
        self, repo_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (repo_root / ".branchsync.toml").write_text("[sync\n")
        monkeypatch.setenv("BRANCHSYNC_STRICT_CONFIG", "1")

        with pytest.raises(ConfigLoadError) as exc_info:
            safe_load_config(repository_root=repo_root)

        assert exc_info.value.line == 1

    def test_explicit_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            safe_load_config(config_path=tmp_path / "missing.toml")

    def test_explicit_path_is_loaded(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[sync]\nremote = "mirror"\n')

        config, error = safe_load_config(config_path=path)

        assert error is None
        assert config.sync.remote == "mirror"
