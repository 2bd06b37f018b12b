"""サーバーデータのバックアップ。

公開 API:
    backup_server_data: 管理ツールによるダンプ。
    read_keychain_password: キーチェーンからのパスワード取得。
"""

from counterpart.backup._keychain import KeychainError, read_keychain_password
from counterpart.backup._server import ServerBackupError, backup_server_data

__all__ = [
    "KeychainError",
    "ServerBackupError",
    "backup_server_data",
    "read_keychain_password",
]
