"""宛先ボリュームの Spotlight インデックス無効化。

rsync の実行中に一定時間待ってから ``mdutil -i off`` を実行する。
完了を待たない投げっぱなしのバックグラウンド処理で、
counterpart 本体が先に終了しても動作するよう別セッションで起動する。
起動用のシェルは遅延処理をバックグラウンドに回して即座に終了し、
その場で回収される。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Final

logger = logging.getLogger(__name__)

MDUTIL: Final[str] = "mdutil"

_LAUNCH_TIMEOUT_SECONDS: Final[int] = 10

# $0: mdutil の絶対パス, $1: 宛先パス
_DELAYED_COMMAND_TEMPLATE: Final[str] = '(sleep {delay}; exec "$0" -i off "$1") &'


def build_spotlight_command(mdutil: str, destination: Path, delay_seconds: int) -> list[str]:
    """遅延実行用のシェルコマンドを構築する。"""
    return [
        "/bin/sh",
        "-c",
        _DELAYED_COMMAND_TEMPLATE.format(delay=int(delay_seconds)),
        mdutil,
        str(destination),
    ]


def schedule_spotlight_disable(destination: Path, delay_seconds: int) -> bool:
    """delay_seconds 後に destination の Spotlight インデックスを無効化する。

    失敗は警告ログのみでクローン処理を止めない。

    Returns:
        バックグラウンド処理を起動できた場合 True。
    """
    mdutil = shutil.which(MDUTIL)
    if mdutil is None:
        logger.warning("mdutil not found; Spotlight indexing stays enabled on %s", destination)
        return False
    try:
        launcher = subprocess.run(
            build_spotlight_command(mdutil, destination, delay_seconds),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
            check=False,
            timeout=_LAUNCH_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Cannot schedule Spotlight disable on %s: %s", destination, e)
        return False
    if launcher.returncode != 0:
        logger.warning(
            "Cannot schedule Spotlight disable on %s: launcher exited with %d",
            destination,
            launcher.returncode,
        )
        return False
    logger.info(
        "Spotlight indexing on %s will be disabled in %ds", destination, delay_seconds
    )
    return True
