"""クローン前のサーバーデータのダンプ。

macOS Server の管理ツールを呼び出し、サービス設定・Open Directory・
PostgreSQL のダンプをソースボリューム上のバックアップディレクトリに書き出す。
書き出したファイルはそのままクローンに含まれる。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Final

from counterpart.errors import CounterpartError
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class ServerBackupError(CounterpartError):
    """サーバーデータのダンプに失敗した。"""

    default_exit_code = ExitCode.SERVER_BACKUP_FAILED


SERVERADMIN_SETTINGS_FILE: Final[str] = "serveradmin.settings"
OPEN_DIRECTORY_ARCHIVE: Final[str] = "opendirectory"
POSTGRES_DUMP_FILE: Final[str] = "postgres.sql"

_POSTGRES_USER: Final[str] = "_postgres"
_BACKUP_DIR_MODE: Final[int] = 0o700


def _run_admin_command(
    cmd: list[str],
    timeout: int,
    *,
    input_text: str | None = None,
) -> str:
    """管理ツールを実行し stdout を返す共通ヘルパー。

    Raises:
        ServerBackupError: コマンド失敗・タイムアウト時。
    """
    name = cmd[0]
    try:
        result = subprocess.run(
            cmd,
            input=input_text,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ServerBackupError(f"{name} command not found.") from None
    except subprocess.TimeoutExpired as e:
        raise ServerBackupError(f"{name} timed out after {timeout}s.") from e
    except subprocess.CalledProcessError as e:
        raise ServerBackupError(
            f"{name} failed with exit code {e.returncode}: {(e.stderr or '').strip()}"
        ) from e
    return result.stdout


def _write_output(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
        path.chmod(0o600)
    except OSError as e:
        raise ServerBackupError(f"Cannot write {path}: {e}") from e


def dump_serveradmin_settings(backup_dir: Path, timeout: int) -> Path:
    """``serveradmin settings all`` の出力を保存する。"""
    output = _run_admin_command(["serveradmin", "settings", "all"], timeout)
    path = backup_dir / SERVERADMIN_SETTINGS_FILE
    _write_output(path, output)
    return path


def dump_open_directory(backup_dir: Path, password: str, timeout: int) -> Path:
    """``slapconfig -backupdb`` で Open Directory のアーカイブを作成する。

    アーカイブの暗号化パスワードは標準入力から渡す。
    """
    archive = backup_dir / OPEN_DIRECTORY_ARCHIVE
    _run_admin_command(
        ["slapconfig", "-backupdb", str(archive)],
        timeout,
        input_text=f"{password}\n",
    )
    return archive


def dump_postgres(backup_dir: Path, timeout: int) -> Path:
    """``pg_dumpall`` の出力を保存する。"""
    output = _run_admin_command(["pg_dumpall", "--username", _POSTGRES_USER], timeout)
    path = backup_dir / POSTGRES_DUMP_FILE
    _write_output(path, output)
    return path


def backup_server_data(password: str, backup_dir: Path, timeout: int) -> list[Path]:
    """サーバーデータを backup_dir にダンプする。

    PATH 上にない管理ツールは警告を出してスキップする。
    実行したツールが失敗した場合は即座に中断する。

    Args:
        password: Open Directory アーカイブのパスワード。
        backup_dir: 出力ディレクトリ（なければ 0700 で作成）。
        timeout: 各ツールのタイムアウト秒数。

    Returns:
        作成したファイル・アーカイブのパス。

    Raises:
        ServerBackupError: ディレクトリ作成またはダンプに失敗した場合。
    """
    try:
        backup_dir.mkdir(mode=_BACKUP_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ServerBackupError(
            f"Cannot create backup directory {backup_dir}: {e}\n"
            "Check backup_dir in the configuration."
        ) from e

    created: list[Path] = []
    if shutil.which("serveradmin") is not None:
        logger.info("Dumping server settings")
        created.append(dump_serveradmin_settings(backup_dir, timeout))
    else:
        logger.warning("serveradmin not found; skipping server settings")

    if shutil.which("slapconfig") is not None:
        logger.info("Archiving Open Directory")
        created.append(dump_open_directory(backup_dir, password, timeout))
    else:
        logger.warning("slapconfig not found; skipping Open Directory")

    if shutil.which("pg_dumpall") is not None:
        logger.info("Dumping PostgreSQL databases")
        created.append(dump_postgres(backup_dir, timeout))

    return created
