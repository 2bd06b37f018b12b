"""設定リゾルバー。

デフォルト値 < システム設定 < ユーザー設定 < COUNTERPART_CONFIG < CLI の順に
項目単位で上書きする。
"""

from __future__ import annotations

from counterpart.config._loader import load_optional_toml_config, load_toml_config
from counterpart.config._locator import (
    get_env_config_path,
    get_system_config_path,
    get_user_config_path,
)
from counterpart.models.config import CounterpartConfig


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        result.update(layer)
    return result


def filter_cli_overrides(cli_options: dict[str, object]) -> dict[str, object]:
    """CLI オプション辞書から None 値（未指定）を除外する。"""
    return {k: v for k, v in cli_options.items() if v is not None}


def resolve_config(
    cli_overrides: dict[str, object] | None = None,
) -> CounterpartConfig:
    """設定ソースを解決し CounterpartConfig を構築する。

    設定ファイルが存在しない場合は該当レイヤーをスキップする。
    COUNTERPART_CONFIG で明示されたファイルは存在しなければエラーとする。

    Args:
        cli_overrides: CLI オプションの辞書。None 値は未指定扱い。

    Returns:
        解決済みの CounterpartConfig インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: 設定ファイルの TOML 構文が不正な場合。
        PermissionError: 設定ファイルの読み取り権限がない場合。
        FileNotFoundError: COUNTERPART_CONFIG のファイルが存在しない場合。
    """
    system_layer = load_optional_toml_config(get_system_config_path())
    user_layer = load_optional_toml_config(get_user_config_path())

    env_layer: dict[str, object] | None = None
    env_path = get_env_config_path()
    if env_path is not None:
        env_layer = load_toml_config(env_path)

    cli_layer: dict[str, object] | None = None
    if cli_overrides is not None:
        cli_layer = filter_cli_overrides(cli_overrides)

    merged = merge_config_layers(system_layer, user_layer, env_layer, cli_layer)
    return CounterpartConfig(**merged)  # type: ignore[arg-type]
