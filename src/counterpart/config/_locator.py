"""設定ファイルの探索。

システム設定・ユーザー設定・環境変数で指定された設定ファイルのパスを返す。
いずれも存在チェックは行わない（パスのみ構築）。
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

_CONFIG_FILE_NAME: Final[str] = "config.toml"
_APP_DIR_NAME: Final[str] = "counterpart"

CONFIG_ENV_VAR: Final[str] = "COUNTERPART_CONFIG"
"""追加の設定ファイルを指定する環境変数名。"""


def get_system_config_path() -> Path:
    """システム全体の設定ファイルパス（/etc/counterpart/config.toml）を返す。"""
    return Path("/etc") / _APP_DIR_NAME / _CONFIG_FILE_NAME


def get_user_config_path() -> Path:
    """ユーザー設定ファイルのパスを返す。

    sudo 実行時も ``Path.home()`` は root のホームを指すため、
    root で常用する運用では ~root/.config/counterpart/config.toml になる。

    Raises:
        RuntimeError: ホームディレクトリを特定できない場合。
    """
    return Path.home() / ".config" / _APP_DIR_NAME / _CONFIG_FILE_NAME


def get_env_config_path(environ: Mapping[str, str] | None = None) -> Path | None:
    """COUNTERPART_CONFIG 環境変数で指定された設定ファイルパスを返す。

    Args:
        environ: 参照する環境変数。None の場合は os.environ。

    Returns:
        指定されたパス。未設定または空文字列の場合は None。
    """
    env = os.environ if environ is None else environ
    value = env.get(CONFIG_ENV_VAR, "")
    if not value:
        return None
    return Path(value).expanduser()
