"""ロックファイルによる多重起動防止。

ファイルの存在チェックのみで判定する（相互排他としては競合しうる）。
ロックファイルには実行中インスタンスの pid を書き込む。
"""

from __future__ import annotations

import logging
import os
import signal
from pathlib import Path
from types import TracebackType

from counterpart.errors import CounterpartError
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class LockError(CounterpartError):
    """ロックファイルの作成・削除に失敗した。"""

    default_exit_code = ExitCode.LOCK_ERROR


class AlreadyRunningError(CounterpartError):
    """別のインスタンスが実行中（ロックファイルが存在する）。"""

    default_exit_code = ExitCode.ALREADY_RUNNING


class NotRunningError(CounterpartError):
    """停止対象のインスタンスが存在しない。"""

    default_exit_code = ExitCode.NOT_RUNNING


def read_lock_pid(path: Path) -> int | None:
    """ロックファイルの pid を返す。ファイルがない・内容が不正なら None。"""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    try:
        return int(text)
    except ValueError:
        return None


class LockFile:
    """pid を記録するロックファイル。with 文で取得・解放する。"""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._acquired = False

    def acquire(self) -> None:
        """ロックを取得する。

        Raises:
            AlreadyRunningError: ロックファイルが既に存在する場合。
            LockError: ロックファイルを作成できない場合。
        """
        if self.path.exists():
            pid = read_lock_pid(self.path)
            raise AlreadyRunningError(
                f"Another instance is already running (pid {pid}, lock {self.path}).\n"
                "Use -k to stop it, or remove the lock file if it is stale."
            )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(f"{os.getpid()}\n", encoding="utf-8")
        except OSError as e:
            raise LockError(f"Cannot create lock file {self.path}: {e}") from e
        self._acquired = True
        logger.debug("Lock acquired: %s", self.path)

    def release(self) -> None:
        """ロックを解放する。取得していなければ何もしない。

        Raises:
            LockError: ロックファイルを削除できない場合。
        """
        if not self._acquired:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise LockError(f"Cannot remove lock file {self.path}: {e}") from e
        self._acquired = False
        logger.debug("Lock released: %s", self.path)

    def __enter__(self) -> LockFile:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def kill_running_instance(path: Path) -> int:
    """ロックファイルに記録されたインスタンスに SIGTERM を送り、ロックを削除する。

    Args:
        path: ロックファイルのパス。

    Returns:
        シグナルを送った pid。

    Raises:
        NotRunningError: ロックファイルがない、pid が不正、プロセスが存在しない、
            またはシグナル送信の権限がない場合。
        LockError: ロックファイルを削除できない場合。
    """
    if not path.exists():
        raise NotRunningError(f"No running instance found (no lock file at {path}).")
    pid = read_lock_pid(path)
    if pid is None:
        raise NotRunningError(
            f"Lock file {path} does not contain a valid pid.\n"
            "Remove the lock file manually."
        )
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        path.unlink(missing_ok=True)
        raise NotRunningError(
            f"Process {pid} is not running; removed stale lock file {path}."
        ) from None
    except PermissionError as e:
        raise NotRunningError(
            f"Not permitted to stop process {pid}: {e}\nRun as root."
        ) from e
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise LockError(f"Cannot remove lock file {path}: {e}") from e
    logger.info("Sent SIGTERM to process %d", pid)
    return pid
