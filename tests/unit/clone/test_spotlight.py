"""Spotlight 無効化の予約のテスト。"""

from __future__ import annotations

import subprocess
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

from counterpart.clone._spotlight import (
    build_spotlight_command,
    schedule_spotlight_disable,
)
from tests.unit.clone.conftest import make_executable

PATCH_WHICH = "counterpart.clone._spotlight.shutil.which"
PATCH_RUN = "counterpart.clone._spotlight.subprocess.run"


class TestBuildSpotlightCommand:
    def test_command_shape(self) -> None:
        cmd = build_spotlight_command("/usr/bin/mdutil", Path("/Volumes/B"), 30)
        assert cmd[:2] == ["/bin/sh", "-c"]
        assert cmd[2].startswith("(sleep 30;")
        assert cmd[2].endswith("&")
        assert cmd[3:] == ["/usr/bin/mdutil", "/Volumes/B"]

    def test_path_is_not_interpolated_into_script(self) -> None:
        """宛先パスはシェルスクリプト本文ではなく位置引数で渡す。"""
        cmd = build_spotlight_command("/usr/bin/mdutil", Path("/Volumes/A B;rm"), 1)
        assert "A B" not in cmd[2]


class TestScheduleSpotlightDisable:
    @patch(PATCH_RUN)
    @patch(PATCH_WHICH, return_value="/usr/bin/mdutil")
    def test_launches_in_new_session(self, _which: MagicMock, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess([], 0)
        assert schedule_spotlight_disable(Path("/Volumes/B"), 5) is True
        mock_run.assert_called_once()
        kwargs = mock_run.call_args.kwargs
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] is subprocess.DEVNULL

    @patch(PATCH_RUN)
    @patch(PATCH_WHICH, return_value=None)
    def test_missing_mdutil_is_skipped(self, _which: MagicMock, mock_run: MagicMock) -> None:
        assert schedule_spotlight_disable(Path("/Volumes/B"), 5) is False
        mock_run.assert_not_called()

    @patch(PATCH_RUN, side_effect=OSError("fork failed"))
    @patch(PATCH_WHICH, return_value="/usr/bin/mdutil")
    def test_spawn_failure_is_not_fatal(self, _which: MagicMock, _run: MagicMock) -> None:
        assert schedule_spotlight_disable(Path("/Volumes/B"), 5) is False

    @patch(PATCH_RUN)
    @patch(PATCH_WHICH, return_value="/usr/bin/mdutil")
    def test_launcher_failure_is_not_fatal(
        self, _which: MagicMock, mock_run: MagicMock
    ) -> None:
        mock_run.return_value = subprocess.CompletedProcess([], 2)
        assert schedule_spotlight_disable(Path("/Volumes/B"), 5) is False


class TestDelayedExecution:
    """起動用シェルは即座に終了し、遅延後に mdutil が実行される。"""

    def test_returns_before_delay_and_runs_later(self, tmp_path: Path) -> None:
        trace = tmp_path / "trace"
        mdutil = make_executable(
            tmp_path / "mdutil", f'echo "$@" > {trace}.tmp && mv {trace}.tmp {trace}'
        )
        started = time.monotonic()
        with patch(PATCH_WHICH, return_value=str(mdutil)):
            assert schedule_spotlight_disable(tmp_path / "dest", 2) is True
        assert time.monotonic() - started < 2
        deadline = time.monotonic() + 10
        while not trace.exists() and time.monotonic() < deadline:
            time.sleep(0.1)
        assert trace.read_text(encoding="utf-8") == f"-i off {tmp_path / 'dest'}\n"
