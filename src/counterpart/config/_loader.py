"""TOML 設定ファイルローダー。

パースのみを担当し、バリデーションは _resolver.py が担当する。
アクセスエラーは例外として送出する。
"""

from __future__ import annotations

import tomllib
from pathlib import Path


def load_toml_config(path: Path) -> dict[str, object]:
    """TOML 設定ファイルを読み込み辞書として返す。

    Args:
        path: TOML ファイルのパス。

    Returns:
        パースされた設定辞書。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        PermissionError: 読み取り権限がない場合。
        FileNotFoundError: ファイルが存在しない場合。
    """
    with path.open("rb") as f:
        return tomllib.load(f)


def load_optional_toml_config(path: Path | None) -> dict[str, object] | None:
    """存在しないファイルを None として扱う load_toml_config。"""
    if path is None:
        return None
    try:
        return load_toml_config(path)
    except FileNotFoundError:
        return None
