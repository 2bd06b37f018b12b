"""CloneRunner — 1回のクローン実行の逐次制御。

パス検証 → rsync 解決 → ロック取得 → ログ作成 → 前処理スクリプト →
サーバーデータのダンプ → Spotlight 無効化の予約 → rsync 実行 →
終了コードの分類と成果物の書き込み → 後処理スクリプト → ロック解放。

各ステップの失敗は CounterpartError として即座に送出する。再試行はしない。
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from datetime import datetime
from pathlib import Path
from types import FrameType

from counterpart._log import file_logging
from counterpart.backup import backup_server_data
from counterpart.clone._artifacts import (
    LogFileError,
    create_log_files,
    make_run_paths,
    write_completion_marker,
    write_error_marker,
    write_stats,
)
from counterpart.clone._lock import LockFile
from counterpart.clone._rsync import build_rsync_args, locate_rsync, run_rsync
from counterpart.clone._scripts import ScriptKind, run_script
from counterpart.clone._spotlight import schedule_spotlight_disable
from counterpart.errors import CounterpartError
from counterpart.models.clone import CloneRequest, CloneResult, RunPaths
from counterpart.models.config import CounterpartConfig
from counterpart.models.exit_code import ExitCode
from counterpart.models.outcome import OutcomePolicy, SyncOutcome, policy_for_exit_code

logger = logging.getLogger(__name__)


class InvalidPathError(CounterpartError):
    """ソース・宛先・除外ファイルのいずれかが存在しない。"""

    def __init__(self, message: str, exit_code: ExitCode) -> None:
        super().__init__(message, exit_code)


def validate_request(request: CloneRequest) -> None:
    """CLI で指定されたパスの存在を検証する。

    Raises:
        InvalidPathError: ソース(65)・宛先(66)がディレクトリでない、
            または除外ファイル(67)が存在しない場合。
    """
    if not request.source.is_dir():
        raise InvalidPathError(
            f"Source is not a directory: {request.source}", ExitCode.SOURCE_NOT_FOUND
        )
    if not request.destination.is_dir():
        raise InvalidPathError(
            f"Destination is not a directory: {request.destination}\n"
            "Mount the destination volume first.",
            ExitCode.DESTINATION_NOT_FOUND,
        )
    if request.exclude_file is not None and not request.exclude_file.is_file():
        raise InvalidPathError(
            f"Exclude file not found: {request.exclude_file}",
            ExitCode.EXCLUDE_FILE_NOT_FOUND,
        )


def _raise_system_exit(signum: int, frame: FrameType | None) -> None:
    logger.error("Terminated by signal %d", signum)
    raise SystemExit(128 + signum)


@contextmanager
def _exit_on_sigterm() -> Iterator[None]:
    """SIGTERM を SystemExit に変換し、ロック解放と rsync の停止を保証する。"""
    previous = signal.signal(signal.SIGTERM, _raise_system_exit)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@contextmanager
def _log_failure() -> Iterator[None]:
    """CounterpartError をログに記録してから再送出する。"""
    try:
        yield
    except CounterpartError as e:
        logger.error("%s", e)
        raise


def run_clone(
    request: CloneRequest,
    config: CounterpartConfig,
    now: datetime | None = None,
) -> CloneResult:
    """クローンを実行する。

    Args:
        request: CLI 由来の入力。
        config: 解決済みの設定。
        now: ログファイル名に使う開始時刻。None の場合は現在時刻。

    Returns:
        rsync の終了コードを分類した実行結果。
        rsync 自体の失敗は例外ではなく結果の exit_code で表す。

    Raises:
        CounterpartError: rsync 実行以外のステップが失敗した場合。
            送出前にログへ記録済み。
    """
    with _log_failure():
        validate_request(request)
        rsync = locate_rsync(config.rsync_path)
    started = now if now is not None else datetime.now()
    paths = make_run_paths(config.log_dir, request.destination, started)

    with ExitStack() as stack:
        with _log_failure():
            stack.enter_context(_exit_on_sigterm())
            stack.enter_context(LockFile(config.lock_file))
            create_log_files(paths)
            try:
                stack.enter_context(file_logging(paths.log_file))
            except OSError as e:
                raise LogFileError(
                    f"Cannot open log file {paths.log_file}: {e}"
                ) from e
        # ここからの失敗は実行ログにも記録される
        with _log_failure():
            result = _run_locked(request, config, rsync, paths)
    return result


def _run_locked(
    request: CloneRequest,
    config: CounterpartConfig,
    rsync: Path,
    paths: RunPaths,
) -> CloneResult:
    mode = " (dry run)" if request.dry_run else ""
    logger.info("Cloning %s to %s%s", request.source, request.destination, mode)
    logger.info("Log file: %s", paths.log_file)

    if request.pre_script is not None:
        if request.dry_run:
            logger.info("Dry run: skipping pre-script %s", request.pre_script)
        else:
            run_script(
                ScriptKind.PRE,
                request.pre_script,
                request.source,
                request.destination,
                paths.log_file,
            )

    if request.server_password is not None:
        if request.dry_run:
            logger.info("Dry run: skipping server data backup")
        else:
            backup_server_data(
                request.server_password,
                config.backup_dir,
                config.subprocess_timeout_seconds,
            )

    if not request.dry_run:
        schedule_spotlight_disable(request.destination, config.spotlight_delay_seconds)

    args = build_rsync_args(rsync, request, config.excludes)
    return_code = run_rsync(args, paths)
    policy = policy_for_exit_code(return_code)
    _log_outcome(policy, return_code, paths)

    stats_written = False
    marker_written = False
    if not request.dry_run:
        finished = datetime.now()
        if policy.write_stats:
            stats_written = write_stats(paths)
        if policy.write_error_marker:
            write_error_marker(paths, policy.outcome, return_code, finished)
        if policy.write_completion_marker:
            write_completion_marker(paths, request.source, return_code, finished)
            marker_written = True

    if policy.completed and request.post_script is not None:
        if request.dry_run:
            logger.info("Dry run: skipping post-script %s", request.post_script)
        else:
            run_script(
                ScriptKind.POST,
                request.post_script,
                request.source,
                request.destination,
                paths.log_file,
            )

    return CloneResult(
        return_code=return_code,
        outcome=policy.outcome,
        exit_code=policy.exit_code,
        paths=paths,
        stats_written=stats_written,
        marker_written=marker_written,
    )


def _log_outcome(policy: OutcomePolicy, return_code: int, paths: RunPaths) -> None:
    if policy.outcome is SyncOutcome.SUCCESS:
        logger.info(policy.message)
    elif policy.outcome is SyncOutcome.SOURCE_VANISHED:
        logger.warning("%s (rsync exit code %d)", policy.message, return_code)
    else:
        logger.error(
            "%s (rsync exit code %d, see %s)",
            policy.message,
            return_code,
            paths.error_log_file,
        )
