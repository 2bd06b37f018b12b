"""設定リゾルバーのテスト。"""

from __future__ import annotations

import tomllib
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from counterpart.config._locator import CONFIG_ENV_VAR
from counterpart.config._resolver import (
    filter_cli_overrides,
    merge_config_layers,
    resolve_config,
)
from counterpart.models.config import DEFAULT_RSYNC_PATH, CounterpartConfig


class TestMergeConfigLayers:
    """merge_config_layers の優先順位。"""

    def test_no_layers_returns_empty_dict(self) -> None:
        assert merge_config_layers() == {}

    def test_none_layers_are_skipped(self) -> None:
        assert merge_config_layers(None, {"org_prefix": "a.b"}, None) == {
            "org_prefix": "a.b"
        }

    def test_later_layer_wins(self) -> None:
        merged = merge_config_layers(
            {"org_prefix": "a.b", "rsync_path": "/x"},
            {"org_prefix": "c.d"},
        )
        assert merged == {"org_prefix": "c.d", "rsync_path": "/x"}


class TestFilterCliOverrides:
    """None 値の除外。"""

    def test_none_values_removed(self) -> None:
        assert filter_cli_overrides({"org_prefix": None, "rsync_path": "/x"}) == {
            "rsync_path": "/x"
        }

    def test_empty_dict(self) -> None:
        assert filter_cli_overrides({}) == {}


@pytest.fixture
def config_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[tuple[Path, Path]]:
    """システム・ユーザー設定ファイルのパスを tmp_path 配下に差し替える。"""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    system = tmp_path / "etc" / "config.toml"
    user = tmp_path / "home" / "config.toml"
    system.parent.mkdir()
    user.parent.mkdir()
    with (
        patch("counterpart.config._resolver.get_system_config_path", return_value=system),
        patch("counterpart.config._resolver.get_user_config_path", return_value=user),
    ):
        yield system, user


class TestResolveConfig:
    """resolve_config の階層解決。"""

    def test_no_files_gives_defaults(self, config_files: tuple[Path, Path]) -> None:
        assert resolve_config() == CounterpartConfig()

    def test_system_layer_applied(self, config_files: tuple[Path, Path]) -> None:
        system, _ = config_files
        system.write_text('rsync_path = "/opt/rsync"\n', encoding="utf-8")
        assert resolve_config().rsync_path == "/opt/rsync"

    def test_user_overrides_system(self, config_files: tuple[Path, Path]) -> None:
        system, user = config_files
        system.write_text('org_prefix = "org.system"\n', encoding="utf-8")
        user.write_text('org_prefix = "org.user"\n', encoding="utf-8")
        assert resolve_config().org_prefix == "org.user"

    def test_env_file_overrides_user(
        self,
        config_files: tuple[Path, Path],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _, user = config_files
        user.write_text("spotlight_delay_seconds = 5\n", encoding="utf-8")
        env_file = tmp_path / "env.toml"
        env_file.write_text("spotlight_delay_seconds = 7\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))
        assert resolve_config().spotlight_delay_seconds == 7

    def test_missing_env_file_raises(
        self,
        config_files: tuple[Path, Path],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """明示された設定ファイルが存在しない場合はエラー。"""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        with pytest.raises(FileNotFoundError):
            resolve_config()

    def test_cli_overrides_everything(self, config_files: tuple[Path, Path]) -> None:
        _, user = config_files
        user.write_text('org_prefix = "org.user"\n', encoding="utf-8")
        config = resolve_config(cli_overrides={"org_prefix": "org.cli"})
        assert config.org_prefix == "org.cli"

    def test_cli_none_does_not_override(self, config_files: tuple[Path, Path]) -> None:
        _, user = config_files
        user.write_text('org_prefix = "org.user"\n', encoding="utf-8")
        config = resolve_config(cli_overrides={"org_prefix": None})
        assert config.org_prefix == "org.user"
        assert config.rsync_path == DEFAULT_RSYNC_PATH

    def test_invalid_value_raises_validation_error(
        self, config_files: tuple[Path, Path]
    ) -> None:
        system, _ = config_files
        system.write_text("spotlight_delay_seconds = -3\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            resolve_config()

    def test_unknown_key_raises_validation_error(
        self, config_files: tuple[Path, Path]
    ) -> None:
        _, user = config_files
        user.write_text("no_such_option = true\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            resolve_config()

    def test_syntax_error_propagates(self, config_files: tuple[Path, Path]) -> None:
        _, user = config_files
        user.write_text("broken = = toml", encoding="utf-8")
        with pytest.raises(tomllib.TOMLDecodeError):
            resolve_config()
