"""実行成果物（ログ・統計・マーカーファイル）。

1回の実行はタイムスタンプ付きログ1つ（と並列の .error ログ）を作り、
完了した実行は宛先に完了マーカーをちょうど1つ書き込む。
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final

from counterpart.errors import CounterpartError
from counterpart.models.clone import RunPaths
from counterpart.models.exit_code import ExitCode
from counterpart.models.outcome import SyncOutcome

logger = logging.getLogger(__name__)


class LogFileError(CounterpartError):
    """ログファイルを作成できない。"""

    default_exit_code = ExitCode.LOG_ERROR


class MarkerWriteError(CounterpartError):
    """統計ファイルまたはマーカーファイルを書き込めない。"""

    default_exit_code = ExitCode.MARKER_ERROR


LOG_TIMESTAMP_FORMAT: Final[str] = "%Y%m%d-%H%M%S"
ERROR_LOG_SUFFIX: Final[str] = ".error"

STATS_FILE_NAME: Final[str] = ".counterpart.stats"
COMPLETION_MARKER_NAME: Final[str] = ".counterpart.done"
ERROR_MARKER_NAME: Final[str] = ".counterpart.error"

_STATS_FIRST_LINE: Final[str] = "Number of files"
_STATS_LAST_LINE: Final[str] = "total size is"


def _error_log_for(log_file: Path) -> Path:
    return log_file.with_name(log_file.name + ERROR_LOG_SUFFIX)


def make_run_paths(log_dir: Path, destination: Path, now: datetime) -> RunPaths:
    """実行時刻からログ・成果物ファイルのパスを構築する。

    同じ秒のログが既にある場合は ``-1``, ``-2`` ... の連番を付ける。
    """
    stem = f"counterpart-{now.strftime(LOG_TIMESTAMP_FORMAT)}"
    log_file = log_dir / f"{stem}.log"
    sequence = 1
    while log_file.exists() or _error_log_for(log_file).exists():
        log_file = log_dir / f"{stem}-{sequence}.log"
        sequence += 1
    return RunPaths(
        log_file=log_file,
        error_log_file=_error_log_for(log_file),
        stats_file=destination / STATS_FILE_NAME,
        completion_marker=destination / COMPLETION_MARKER_NAME,
        error_marker=destination / ERROR_MARKER_NAME,
    )


def create_log_files(paths: RunPaths) -> None:
    """ログディレクトリと2つのログファイルを新規作成する。

    Raises:
        LogFileError: 作成に失敗した場合、またはファイルが既に存在する場合。
    """
    try:
        paths.log_file.parent.mkdir(parents=True, exist_ok=True)
        paths.log_file.touch(exist_ok=False)
        paths.error_log_file.touch(exist_ok=False)
    except OSError as e:
        raise LogFileError(
            f"Cannot create log file {paths.log_file}: {e}\n"
            "Check log_dir in the configuration and its permissions."
        ) from e


def extract_stats(log_text: str) -> str | None:
    """rsync --stats の出力ブロックをログ本文から取り出す。

    最後に現れた "Number of files" 行から "total size is" 行までを返す。
    見つからない場合は None。
    """
    lines = log_text.splitlines()
    start: int | None = None
    for index, line in enumerate(lines):
        if line.startswith(_STATS_FIRST_LINE):
            start = index
    if start is None:
        return None
    for end in range(start, len(lines)):
        if lines[end].startswith(_STATS_LAST_LINE):
            return "\n".join(lines[start : end + 1]) + "\n"
    return "\n".join(lines[start:]) + "\n"


def write_stats(paths: RunPaths) -> bool:
    """実行ログから統計ブロックを抽出し統計ファイルに書き込む。

    Returns:
        書き込んだ場合 True。ログに統計がない場合は False。

    Raises:
        MarkerWriteError: 読み書きに失敗した場合。
    """
    try:
        log_text = paths.log_file.read_text(encoding="utf-8", errors="replace")
        stats = extract_stats(log_text)
        if stats is None:
            logger.warning("No statistics found in %s", paths.log_file)
            return False
        paths.stats_file.write_text(stats, encoding="utf-8")
    except OSError as e:
        raise MarkerWriteError(f"Cannot write statistics file: {e}") from e
    logger.info("Statistics written to %s", paths.stats_file)
    return True


def write_completion_marker(
    paths: RunPaths, source: Path, return_code: int, now: datetime
) -> None:
    """完了マーカーを書き込み、古いエラーマーカーを削除する。

    既存の完了マーカーは上書きされる。

    Raises:
        MarkerWriteError: 書き込みに失敗した場合。
    """
    content = (
        f"completed={now.isoformat(timespec='seconds')}\n"
        f"source={source}\n"
        f"rsync_exit_code={return_code}\n"
    )
    try:
        paths.completion_marker.write_text(content, encoding="utf-8")
        paths.error_marker.unlink(missing_ok=True)
    except OSError as e:
        raise MarkerWriteError(f"Cannot write completion marker: {e}") from e


def write_error_marker(
    paths: RunPaths, outcome: SyncOutcome, return_code: int, now: datetime
) -> None:
    """エラーマーカーを書き込み、前回の完了マーカーを削除する。

    Raises:
        MarkerWriteError: 書き込みに失敗した場合。
    """
    content = (
        f"failed={now.isoformat(timespec='seconds')}\n"
        f"outcome={outcome.value}\n"
        f"rsync_exit_code={return_code}\n"
        f"log={paths.log_file}\n"
    )
    try:
        paths.error_marker.write_text(content, encoding="utf-8")
        paths.completion_marker.unlink(missing_ok=True)
    except OSError as e:
        raise MarkerWriteError(f"Cannot write error marker: {e}") from e
