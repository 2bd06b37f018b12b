"""ExitCode — 終了コードの定義。

0-2 は引数・権限の判定結果、11/12/23/24/30 は rsync の終了コードの
そのままの引き渡し、65-98 はラッパー固有の I/O・設定エラー。
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。"""

    SUCCESS = 0
    NOT_ROOT = 1
    MISSING_ARGUMENT = 2

    # rsync の終了コードをそのまま返すもの
    SYNC_FILE_IO = 11
    SYNC_PROTOCOL_STREAM = 12
    SYNC_PARTIAL_TRANSFER = 23
    SYNC_SOURCE_VANISHED = 24
    SYNC_TIMEOUT = 30

    SOURCE_NOT_FOUND = 65
    DESTINATION_NOT_FOUND = 66
    EXCLUDE_FILE_NOT_FOUND = 67
    RSYNC_NOT_FOUND = 68
    ALREADY_RUNNING = 69
    LOCK_ERROR = 70
    LOG_ERROR = 71
    PRE_SCRIPT_FAILED = 72
    POST_SCRIPT_FAILED = 73
    SERVER_BACKUP_FAILED = 74
    KEYCHAIN_ERROR = 75
    MARKER_ERROR = 76
    NOT_RUNNING = 77
    CONFIG_ERROR = 78
    INSTALL_FAILED = 79

    SYNC_UNKNOWN = 98
