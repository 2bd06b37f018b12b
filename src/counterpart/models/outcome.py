"""SyncOutcome — rsync 終了コードの分類。

rsync の終了コードを固定の結果列挙に写像し、結果ごとに
統計生成・エラーマーカー・完了マーカー・ラッパー終了コードを決める。
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Final

from counterpart.models._base import CounterpartBaseModel
from counterpart.models.exit_code import ExitCode


class SyncOutcome(StrEnum):
    """rsync 実行結果の分類。"""

    SUCCESS = "success"
    FILE_IO_ERROR = "file-io-error"
    PROTOCOL_STREAM_ERROR = "protocol-stream-error"
    SOURCE_VANISHED = "source-vanished"
    TIMEOUT = "timeout"
    PARTIAL_TRANSFER = "partial-transfer"
    UNKNOWN = "unknown"


class OutcomePolicy(CounterpartBaseModel):
    """分類結果に対する後処理の方針。

    Attributes:
        outcome: 対象の分類結果。
        write_stats: 統計ファイルを生成するか。
        write_error_marker: エラーマーカーを書き込むか。
        write_completion_marker: 完了マーカーを書き込むか（完了扱いの実行）。
        exit_code: ラッパープロセスの終了コード。
        message: ログに出力するメッセージ。
    """

    outcome: SyncOutcome
    write_stats: bool
    write_error_marker: bool
    write_completion_marker: bool
    exit_code: ExitCode
    message: str

    @property
    def completed(self) -> bool:
        """クローンが完了扱いかどうか。"""
        return self.write_completion_marker


_CODE_TO_OUTCOME: Final[MappingProxyType[int, SyncOutcome]] = MappingProxyType(
    {
        0: SyncOutcome.SUCCESS,
        11: SyncOutcome.FILE_IO_ERROR,
        12: SyncOutcome.PROTOCOL_STREAM_ERROR,
        23: SyncOutcome.PARTIAL_TRANSFER,
        24: SyncOutcome.SOURCE_VANISHED,
        30: SyncOutcome.TIMEOUT,
    }
)

_POLICIES: Final[MappingProxyType[SyncOutcome, OutcomePolicy]] = MappingProxyType(
    {
        SyncOutcome.SUCCESS: OutcomePolicy(
            outcome=SyncOutcome.SUCCESS,
            write_stats=True,
            write_error_marker=False,
            write_completion_marker=True,
            exit_code=ExitCode.SUCCESS,
            message="Clone completed successfully.",
        ),
        SyncOutcome.FILE_IO_ERROR: OutcomePolicy(
            outcome=SyncOutcome.FILE_IO_ERROR,
            write_stats=False,
            write_error_marker=True,
            write_completion_marker=False,
            exit_code=ExitCode.SYNC_FILE_IO,
            message="Error in file I/O. Check that the destination is writable and not full.",
        ),
        SyncOutcome.PROTOCOL_STREAM_ERROR: OutcomePolicy(
            outcome=SyncOutcome.PROTOCOL_STREAM_ERROR,
            write_stats=False,
            write_error_marker=True,
            write_completion_marker=False,
            exit_code=ExitCode.SYNC_PROTOCOL_STREAM,
            message="Error in rsync protocol data stream.",
        ),
        SyncOutcome.PARTIAL_TRANSFER: OutcomePolicy(
            outcome=SyncOutcome.PARTIAL_TRANSFER,
            write_stats=True,
            write_error_marker=True,
            write_completion_marker=False,
            exit_code=ExitCode.SYNC_PARTIAL_TRANSFER,
            message="Partial transfer due to error. See the error log for the affected files.",
        ),
        SyncOutcome.SOURCE_VANISHED: OutcomePolicy(
            outcome=SyncOutcome.SOURCE_VANISHED,
            write_stats=True,
            write_error_marker=False,
            write_completion_marker=True,
            exit_code=ExitCode.SYNC_SOURCE_VANISHED,
            message="Partial transfer due to vanished source files.",
        ),
        SyncOutcome.TIMEOUT: OutcomePolicy(
            outcome=SyncOutcome.TIMEOUT,
            write_stats=False,
            write_error_marker=True,
            write_completion_marker=False,
            exit_code=ExitCode.SYNC_TIMEOUT,
            message="Timeout in data send/receive.",
        ),
        SyncOutcome.UNKNOWN: OutcomePolicy(
            outcome=SyncOutcome.UNKNOWN,
            write_stats=False,
            write_error_marker=True,
            write_completion_marker=False,
            exit_code=ExitCode.SYNC_UNKNOWN,
            message="rsync failed with an unknown error.",
        ),
    }
)


def classify_exit_code(code: int) -> SyncOutcome:
    """rsync の終了コードを SyncOutcome に分類する。

    表にないコード（負値・シグナル終了を含む）は全て UNKNOWN。
    """
    return _CODE_TO_OUTCOME.get(code, SyncOutcome.UNKNOWN)


def policy_for(outcome: SyncOutcome) -> OutcomePolicy:
    """分類結果に対応する後処理方針を返す。"""
    return _POLICIES[outcome]


def policy_for_exit_code(code: int) -> OutcomePolicy:
    """rsync の終了コードから直接後処理方針を返す。"""
    return policy_for(classify_exit_code(code))
