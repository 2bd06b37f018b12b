"""例外の基底クラス。

各モジュールの例外は CounterpartError を継承し、CLI 層がその exit_code で
プロセスを終了する。エラーメッセージは解決方法のヒントを含む。
"""

from __future__ import annotations

from typing import ClassVar

from counterpart.models.exit_code import ExitCode


class CounterpartError(Exception):
    """counterpart の処理失敗。

    Attributes:
        exit_code: この例外で終了する場合のプロセス終了コード。
    """

    default_exit_code: ClassVar[ExitCode] = ExitCode.SYNC_UNKNOWN

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        super().__init__(message)
        self.exit_code: ExitCode = (
            exit_code if exit_code is not None else self.default_exit_code
        )
