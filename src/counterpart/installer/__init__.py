"""パッチ適用済み rsync のインストーラー。"""

from counterpart.installer._rsync_build import (
    DEFAULT_PREFIX,
    DEFAULT_RSYNC_VERSION,
    REQUIRED_PATCHES,
    InstallError,
    install_patched_rsync,
)

__all__ = [
    "DEFAULT_PREFIX",
    "DEFAULT_RSYNC_VERSION",
    "REQUIRED_PATCHES",
    "InstallError",
    "install_patched_rsync",
]
