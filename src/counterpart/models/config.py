"""設定管理モデル。"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Annotated, Final

from pydantic import Field, StringConstraints, field_validator

from counterpart.models._base import CounterpartBaseModel

DEFAULT_RSYNC_PATH: Final[str] = "/usr/local/bin/rsync"
DEFAULT_LOG_DIR: Final[Path] = Path("/var/log/counterpart")
DEFAULT_LOCK_FILE: Final[Path] = Path("/var/run/counterpart.lock")
DEFAULT_BACKUP_DIR: Final[Path] = Path("/var/backups/counterpart")
DEFAULT_ORG_PREFIX: Final[str] = "de.willner"

# 書き込み直後の宛先ボリュームで Spotlight がインデックスを始める前に無効化する
DEFAULT_SPOTLIGHT_DELAY_SECONDS: Final[int] = 30

DEFAULT_SUBPROCESS_TIMEOUT_SECONDS: Final[int] = 600

# 逆ドメイン形式（例: de.willner, com.example.it）
_ORG_PREFIX_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*$")


class CounterpartConfig(CounterpartBaseModel):
    """全設定項目を統合した不変モデル。

    デフォルト値のみで有効なインスタンスを構築可能。
    """

    # 同期ツール
    rsync_path: str = Field(default=DEFAULT_RSYNC_PATH, min_length=1)
    excludes: tuple[Annotated[str, StringConstraints(min_length=1)], ...] = ()

    # 実行時ファイル
    log_dir: Path = DEFAULT_LOG_DIR
    lock_file: Path = DEFAULT_LOCK_FILE
    backup_dir: Path = DEFAULT_BACKUP_DIR

    # 周辺処理
    spotlight_delay_seconds: int = Field(default=DEFAULT_SPOTLIGHT_DELAY_SECONDS, ge=0)
    subprocess_timeout_seconds: int = Field(
        default=DEFAULT_SUBPROCESS_TIMEOUT_SECONDS, gt=0
    )
    org_prefix: str = Field(default=DEFAULT_ORG_PREFIX, min_length=1)

    @field_validator("org_prefix")
    @classmethod
    def validate_org_prefix(cls, v: str) -> str:
        """キーチェーンのサービス名に使うため逆ドメイン形式を検証する。"""
        if not _ORG_PREFIX_RE.fullmatch(v):
            msg = f"Invalid org prefix '{v}': expected reverse-domain form like 'com.example'"
            raise ValueError(msg)
        return v

    @property
    def keychain_service(self) -> str:
        """サーバーバックアップ用パスワードのキーチェーン項目名。"""
        return f"{self.org_prefix}.counterpart"
