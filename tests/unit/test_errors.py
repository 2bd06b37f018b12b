"""CounterpartError とモジュール例外の終了コードのテスト。"""

from __future__ import annotations

import pytest

from counterpart.backup import KeychainError, ServerBackupError
from counterpart.clone._artifacts import LogFileError, MarkerWriteError
from counterpart.clone._lock import AlreadyRunningError, LockError, NotRunningError
from counterpart.clone._rsync import RsyncNotFoundError
from counterpart.clone._runner import InvalidPathError
from counterpart.clone._scripts import ScriptError
from counterpart.errors import CounterpartError
from counterpart.installer import InstallError
from counterpart.models.exit_code import ExitCode


class TestDefaultExitCodes:
    """各モジュール例外はラッパー固有の終了コードを持つ。"""

    @pytest.mark.parametrize(
        ("error_class", "expected"),
        [
            (RsyncNotFoundError, ExitCode.RSYNC_NOT_FOUND),
            (AlreadyRunningError, ExitCode.ALREADY_RUNNING),
            (LockError, ExitCode.LOCK_ERROR),
            (NotRunningError, ExitCode.NOT_RUNNING),
            (LogFileError, ExitCode.LOG_ERROR),
            (MarkerWriteError, ExitCode.MARKER_ERROR),
            (ServerBackupError, ExitCode.SERVER_BACKUP_FAILED),
            (KeychainError, ExitCode.KEYCHAIN_ERROR),
            (InstallError, ExitCode.INSTALL_FAILED),
        ],
    )
    def test_default(
        self, error_class: type[CounterpartError], expected: ExitCode
    ) -> None:
        error = error_class("failure")
        assert isinstance(error, CounterpartError)
        assert error.exit_code == expected

    def test_explicit_exit_code_overrides_default(self) -> None:
        error = LockError("failure", ExitCode.NOT_RUNNING)
        assert error.exit_code == ExitCode.NOT_RUNNING


class TestExitCodeRequired:
    """複数の終了コードを使い分ける例外は終了コードの指定が必須。"""

    @pytest.mark.parametrize("error_class", [InvalidPathError, ScriptError])
    def test_missing_exit_code_is_rejected(
        self, error_class: type[CounterpartError]
    ) -> None:
        with pytest.raises(TypeError):
            error_class("failure")  # type: ignore[call-arg]

    def test_given_exit_code_is_kept(self) -> None:
        error = ScriptError("failure", ExitCode.POST_SCRIPT_FAILED)
        assert error.exit_code == ExitCode.POST_SCRIPT_FAILED
