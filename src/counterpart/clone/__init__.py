"""クローン実行パッケージ。

公開 API:
    run_clone: 1回のクローン実行。
    kill_running_instance: 実行中インスタンスの停止。
"""

from counterpart.clone._lock import (
    AlreadyRunningError,
    LockError,
    LockFile,
    NotRunningError,
    kill_running_instance,
)
from counterpart.clone._rsync import (
    DEFAULT_EXCLUDES,
    RSYNC_OPTIONS,
    RsyncNotFoundError,
    build_rsync_args,
)
from counterpart.clone._runner import InvalidPathError, run_clone, validate_request

__all__ = [
    "DEFAULT_EXCLUDES",
    "RSYNC_OPTIONS",
    "AlreadyRunningError",
    "InvalidPathError",
    "LockError",
    "LockFile",
    "NotRunningError",
    "RsyncNotFoundError",
    "build_rsync_args",
    "kill_running_instance",
    "run_clone",
    "validate_request",
]
