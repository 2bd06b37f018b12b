"""rsync の起動。

パッチ適用済み rsync（fileflags, crtimes, hfs-compression）向けの
固定引数ベクトルを構築し、1プロセスを起動して終了を待つ。
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Final

from counterpart.errors import CounterpartError
from counterpart.models.clone import CloneRequest, RunPaths
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class RsyncNotFoundError(CounterpartError):
    """rsync バイナリが見つからない、または実行できない。"""

    default_exit_code = ExitCode.RSYNC_NOT_FOUND


RSYNC_OPTIONS: Final[tuple[str, ...]] = (
    "--archive",
    "--hard-links",
    "--acls",
    "--xattrs",
    "--one-file-system",
    "--numeric-ids",
    "--delete",
    # 以下はパッチ適用済み rsync のみが受け付ける
    "--crtimes",
    "--fileflags",
    "--force-change",
    "--protect-decmpfs",
    "--stats",
    "--human-readable",
    "--itemize-changes",
)
"""起動可能なクローンの作成に必要な rsync オプション。"""

DEFAULT_EXCLUDES: Final[tuple[str, ...]] = (
    "/dev/*",
    "/Volumes/*",
    "/Network/*",
    "/cores/*",
    "/private/tmp/*",
    "/private/var/tmp/*",
    "/private/var/vm/*",
    "/private/var/folders/*",
    "/.Spotlight-V100",
    "/.fseventsd",
    "/.Trashes",
    "/.DocumentRevisions-V100",
    "/.MobileBackups",
    "/.hotfiles.btree",
    "/.vol",
    "/.counterpart.*",
)
"""起動ボリュームから複製してはならないパス。"""


def locate_rsync(rsync_path: str) -> Path:
    """rsync バイナリの実行可能なパスを解決する。

    Args:
        rsync_path: 絶対パス、またはPATH 上のコマンド名。

    Returns:
        実行可能な rsync のパス。

    Raises:
        RsyncNotFoundError: 見つからない、または実行権限がない場合。
    """
    if os.sep in rsync_path:
        candidate = Path(rsync_path)
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
    else:
        found = shutil.which(rsync_path)
        if found is not None:
            return Path(found)
    raise RsyncNotFoundError(
        f"rsync not found or not executable: {rsync_path}\n"
        "Run 'counterpart-install-rsync' to build the patched rsync, "
        "or set rsync_path in the configuration."
    )


def _as_directory_argument(path: Path) -> str:
    """rsync がディレクトリの中身を同期するよう末尾スラッシュを付ける。"""
    return str(path).rstrip("/") + "/"


def build_rsync_args(
    rsync: Path,
    request: CloneRequest,
    extra_excludes: tuple[str, ...] = (),
) -> list[str]:
    """rsync の引数ベクトルを構築する。

    Args:
        rsync: rsync バイナリのパス。
        request: クローン実行の入力。
        extra_excludes: 設定ファイル由来の追加除外パターン。

    Returns:
        subprocess に渡す引数リスト（先頭は rsync 自身）。
    """
    args: list[str] = [str(rsync), *RSYNC_OPTIONS]
    if request.dry_run:
        args.append("--dry-run")
    for pattern in (*DEFAULT_EXCLUDES, *extra_excludes):
        args.append(f"--exclude={pattern}")
    if request.exclude_file is not None:
        args.append(f"--exclude-from={request.exclude_file}")
    args.append(_as_directory_argument(request.source))
    args.append(_as_directory_argument(request.destination))
    return args


def run_rsync(args: list[str], paths: RunPaths) -> int:
    """rsync を起動し、終了コードを返す。

    stdout は実行ログに、stderr はエラーログに追記する。
    待機中に例外（SIGTERM による SystemExit 等）が発生した場合は
    rsync を終了させてから再送出する。

    Args:
        args: build_rsync_args で構築した引数ベクトル。
        paths: ログファイルのパス。

    Returns:
        rsync の終了コード。シグナルで終了した場合は負値。

    Raises:
        RsyncNotFoundError: rsync を起動できない場合。
    """
    logger.info("Running: %s", " ".join(args))
    with (
        paths.log_file.open("ab") as stdout,
        paths.error_log_file.open("ab") as stderr,
    ):
        try:
            proc = subprocess.Popen(args, stdout=stdout, stderr=stderr)
        except (FileNotFoundError, PermissionError) as e:
            raise RsyncNotFoundError(
                f"Cannot execute rsync: {e}\n"
                "Check rsync_path in the configuration."
            ) from e
        try:
            return proc.wait()
        except BaseException:
            proc.terminate()
            proc.wait()
            raise
