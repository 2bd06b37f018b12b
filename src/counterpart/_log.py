"""ロギング設定。

コンソールには rich の RichHandler で stderr に出力し、
実行ごとのログファイルには FileHandler でプレーンテキストを追記する。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER_NAME: Final[str] = "counterpart"
_FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_console_logging(verbose: bool = False) -> None:
    """counterpart ロガーに stderr 向け RichHandler を設定する。

    複数回呼ばれても RichHandler は1つだけ保持する。
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)


@contextmanager
def file_logging(log_file: Path) -> Iterator[logging.Handler]:
    """ブロックの間、counterpart ロガーの出力を log_file にも追記する。

    Raises:
        OSError: ログファイルを開けない場合。
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    handler.setLevel(logging.DEBUG)
    previous_level = logger.level
    if previous_level == logging.NOTSET or previous_level > logging.INFO:
        logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        handler.close()
