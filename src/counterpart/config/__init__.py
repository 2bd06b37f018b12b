"""設定管理モジュール。"""

from counterpart.config._resolver import resolve_config

__all__ = [
    "resolve_config",
]
