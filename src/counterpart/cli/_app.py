"""CliApp — counterpart コマンドの Typer アプリケーション定義。

引数なし・-h で使用方法を表示し、-k で実行中インスタンスを停止し、
それ以外は引数検証 → root 確認 → 設定解決 → クローン実行の順に進む。
失敗は全てログに記録してから対応する終了コードで終了する。
"""

from __future__ import annotations

import importlib.metadata
import logging
import os
import tomllib
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from counterpart._log import configure_console_logging
from counterpart.backup import KeychainError, read_keychain_password
from counterpart.clone import kill_running_instance, run_clone
from counterpart.config import resolve_config
from counterpart.errors import CounterpartError
from counterpart.models.clone import CloneRequest
from counterpart.models.config import CounterpartConfig
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS: dict[str, object] = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    name="counterpart",
    help="Create bootable clones of a running macOS system with a patched rsync.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("counterpart"))
        raise typer.Exit()


def _is_root() -> bool:
    return os.geteuid() == 0


def _exit_with_error(message: str, code: ExitCode) -> typer.Exit:
    """エラーをログに記録し、送出すべき typer.Exit を返す。"""
    logger.error("%s", message)
    return typer.Exit(code=code)


def _load_config(org_prefix: str | None) -> CounterpartConfig:
    """設定を解決する。不正な設定は終了コード 78 で終了する。"""
    try:
        return resolve_config(cli_overrides={"org_prefix": org_prefix})
    except (ValidationError, tomllib.TOMLDecodeError, TypeError) as e:
        raise _exit_with_error(
            f"Invalid configuration: {e}\n"
            "Check /etc/counterpart/config.toml and ~/.config/counterpart/config.toml.",
            ExitCode.CONFIG_ERROR,
        ) from None
    except (PermissionError, FileNotFoundError) as e:
        raise _exit_with_error(
            f"Cannot read configuration file: {e}", ExitCode.CONFIG_ERROR
        ) from None


@app.command(context_settings=CONTEXT_SETTINGS)
def clone(
    ctx: typer.Context,
    source: Annotated[
        Path | None, typer.Option("-s", "--source", help="Source volume, e.g. /.")
    ] = None,
    destination: Annotated[
        Path | None,
        typer.Option("-d", "--destination", help="Destination volume mount point."),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option(
            "-b",
            "--password",
            help="Back up server data (Open Directory etc.) using this password.",
        ),
    ] = None,
    keychain: Annotated[
        bool,
        typer.Option(
            "-B",
            "--keychain",
            help="Back up server data using the password stored in the keychain.",
        ),
    ] = False,
    pre_script: Annotated[
        Path | None,
        typer.Option("-p", "--pre-script", help="Script to run before cloning."),
    ] = None,
    post_script: Annotated[
        Path | None,
        typer.Option("-o", "--post-script", help="Script to run after cloning."),
    ] = None,
    exclude_file: Annotated[
        Path | None,
        typer.Option("-e", "--exclude-file", help="File with rsync exclude patterns."),
    ] = None,
    org_prefix: Annotated[
        str | None,
        typer.Option(
            "-g",
            "--org-prefix",
            help="Reverse-domain prefix for the keychain item, e.g. com.example.",
        ),
    ] = None,
    test: Annotated[
        bool, typer.Option("-t", "--test", help="Dry run: show what would be copied.")
    ] = False,
    kill: Annotated[
        bool, typer.Option("-k", "--kill", help="Stop a running instance.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show debug messages.")
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Clone SOURCE to DESTINATION so that DESTINATION is bootable.

    Example: sudo counterpart -s / -d /Volumes/Backup
    """
    configure_console_logging(verbose)

    # 1. 引数なし → 使用方法
    if not any(
        (
            source,
            destination,
            password is not None,
            keychain,
            pre_script,
            post_script,
            exclude_file,
            org_prefix,
            test,
            kill,
        )
    ):
        print(ctx.get_help())
        raise typer.Exit(code=ExitCode.SUCCESS)

    # 2. -k → 実行中インスタンスの停止
    if kill:
        config = _load_config(org_prefix)
        try:
            pid = kill_running_instance(config.lock_file)
        except CounterpartError as e:
            raise _exit_with_error(str(e), e.exit_code) from None
        logger.info("Stopped running instance (pid %d)", pid)
        raise typer.Exit(code=ExitCode.SUCCESS)

    # 3. 引数検証
    if source is None or destination is None:
        raise _exit_with_error(
            "Both source (-s) and destination (-d) are required.\n"
            "Example: sudo counterpart -s / -d /Volumes/Backup",
            ExitCode.MISSING_ARGUMENT,
        )
    if password is not None and keychain:
        raise _exit_with_error(
            "Use either -b PASSWORD or -B (keychain), not both.",
            ExitCode.MISSING_ARGUMENT,
        )

    # 4. root 確認
    if not _is_root():
        raise _exit_with_error(
            "counterpart must be run as root to preserve ownership and flags.\n"
            "Run it again with sudo.",
            ExitCode.NOT_ROOT,
        )

    # 5. 設定解決
    config = _load_config(org_prefix)

    if keychain:
        try:
            password = read_keychain_password(config.keychain_service)
        except KeychainError as e:
            raise _exit_with_error(str(e), e.exit_code) from None

    request = CloneRequest(
        source=source,
        destination=destination,
        exclude_file=exclude_file,
        pre_script=pre_script,
        post_script=post_script,
        server_password=password,
        dry_run=test,
    )

    # 6. クローン実行（失敗は run_clone 内でログ記録済み）
    try:
        result = run_clone(request, config)
    except CounterpartError as e:
        raise typer.Exit(code=e.exit_code) from None

    raise typer.Exit(code=result.exit_code)


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()
