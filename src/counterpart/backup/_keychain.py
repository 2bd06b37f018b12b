"""キーチェーンからのパスワード取得。"""

from __future__ import annotations

import subprocess
from typing import Final

from counterpart.errors import CounterpartError
from counterpart.models.exit_code import ExitCode

_SECURITY_TIMEOUT_SECONDS: Final[int] = 30


class KeychainError(CounterpartError):
    """キーチェーンからパスワードを取得できない。"""

    default_exit_code = ExitCode.KEYCHAIN_ERROR


def read_keychain_password(service: str) -> str:
    """``security find-generic-password`` で汎用パスワード項目を読み出す。

    Args:
        service: キーチェーン項目のサービス名（例: ``de.willner.counterpart``）。

    Returns:
        パスワード文字列（末尾改行除去済み）。

    Raises:
        KeychainError: security コマンドが失敗・未インストール・タイムアウトした場合、
            または項目が空の場合。
    """
    cmd = ["security", "find-generic-password", "-s", service, "-w"]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=_SECURITY_TIMEOUT_SECONDS,
        )
    except FileNotFoundError:
        raise KeychainError(
            "security command not found. Keychain lookup is only available on macOS; "
            "pass the password with -b instead."
        ) from None
    except subprocess.TimeoutExpired as e:
        raise KeychainError(
            f"Keychain lookup timed out after {_SECURITY_TIMEOUT_SECONDS}s."
        ) from e
    except subprocess.CalledProcessError as e:
        raise KeychainError(
            f"No keychain item for service '{service}': {(e.stderr or '').strip()}\n"
            f"Add it with: security add-generic-password -s {service} -a root -w"
        ) from e

    password = result.stdout.rstrip("\n")
    if not password:
        raise KeychainError(f"Keychain item for service '{service}' is empty.")
    return password
