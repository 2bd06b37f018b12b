"""ユーザー指定の前処理・後処理スクリプトの実行。"""

from __future__ import annotations

import logging
import os
import subprocess
from enum import StrEnum
from pathlib import Path

from counterpart.errors import CounterpartError
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class ScriptKind(StrEnum):
    PRE = "pre"
    POST = "post"


_EXIT_CODES: dict[ScriptKind, ExitCode] = {
    ScriptKind.PRE: ExitCode.PRE_SCRIPT_FAILED,
    ScriptKind.POST: ExitCode.POST_SCRIPT_FAILED,
}


class ScriptError(CounterpartError):
    """スクリプトが存在しない、実行できない、または非ゼロで終了した。"""

    def __init__(self, message: str, exit_code: ExitCode) -> None:
        super().__init__(message, exit_code)


def run_script(
    kind: ScriptKind,
    script: Path,
    source: Path,
    destination: Path,
    log_file: Path,
) -> None:
    """スクリプトを引数 ``<source> <destination>`` で実行する。

    stdout と stderr は実行ログに追記する。

    Raises:
        ScriptError: 実行できない、または非ゼロで終了した場合。
            exit_code は pre なら 72、post なら 73。
    """
    exit_code = _EXIT_CODES[kind]
    if not script.is_file() or not os.access(script, os.X_OK):
        raise ScriptError(
            f"{kind.value}-script is not an executable file: {script}\n"
            f"Run 'chmod +x {script}' or check the path.",
            exit_code,
        )

    logger.info("Running %s-script: %s", kind.value, script)
    try:
        with log_file.open("ab") as log:
            result = subprocess.run(
                [str(script), str(source), str(destination)],
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
                check=False,
            )
    except OSError as e:
        raise ScriptError(f"Cannot run {kind.value}-script {script}: {e}", exit_code) from e

    if result.returncode != 0:
        raise ScriptError(
            f"{kind.value}-script {script} failed with exit code {result.returncode}.\n"
            f"See {log_file} for its output.",
            exit_code,
        )
