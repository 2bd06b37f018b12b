"""クローン実行の入力と結果。"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from counterpart.models._base import CounterpartBaseModel
from counterpart.models.exit_code import ExitCode
from counterpart.models.outcome import SyncOutcome


class CloneRequest(CounterpartBaseModel):
    """1回のクローン実行に必要な CLI 由来の入力。

    Attributes:
        source: クローン元ディレクトリ（通常は起動ボリューム ``/``）。
        destination: クローン先ボリュームのマウントポイント。
        exclude_file: 追加の除外パターンファイル（rsync --exclude-from）。
        pre_script: rsync 実行前に走らせるスクリプト。
        post_script: クローン完了後に走らせるスクリプト。
        server_password: サーバーデータのバックアップに使うパスワード。
            None の場合はサーバーデータのバックアップを行わない。
        dry_run: rsync を --dry-run で実行し、宛先へのファイル書き込みを行わない。
    """

    source: Path
    destination: Path
    exclude_file: Path | None = None
    pre_script: Path | None = None
    post_script: Path | None = None
    server_password: str | None = Field(default=None, repr=False)
    dry_run: bool = False

    @property
    def backup_server_data(self) -> bool:
        return self.server_password is not None


class RunPaths(CounterpartBaseModel):
    """1回の実行で生成されるログ・成果物ファイルのパス。"""

    log_file: Path
    error_log_file: Path
    stats_file: Path
    completion_marker: Path
    error_marker: Path


class CloneResult(CounterpartBaseModel):
    """クローン実行の結果。

    Attributes:
        return_code: rsync の生の終了コード。
        outcome: 終了コードの分類結果。
        exit_code: ラッパープロセスの終了コード。
        paths: 実行で使用したファイルパス。
        stats_written: 統計ファイルを書き込んだか。
        marker_written: 完了マーカーを書き込んだか。
    """

    return_code: int
    outcome: SyncOutcome
    exit_code: ExitCode
    paths: RunPaths
    stats_written: bool = False
    marker_written: bool = False
