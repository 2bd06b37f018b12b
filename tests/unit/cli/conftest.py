"""CLI テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from counterpart.models.clone import CloneResult, RunPaths
from counterpart.models.config import CounterpartConfig
from counterpart.models.outcome import policy_for_exit_code

PATCH_RUN_CLONE = "counterpart.cli._app.run_clone"
PATCH_RESOLVE_CONFIG = "counterpart.cli._app.resolve_config"
PATCH_IS_ROOT = "counterpart.cli._app._is_root"
PATCH_KILL = "counterpart.cli._app.kill_running_instance"
PATCH_KEYCHAIN = "counterpart.cli._app.read_keychain_password"


def make_clone_result(return_code: int = 0) -> CloneResult:
    """テスト用の CloneResult を rsync の終了コードから生成する。"""
    policy = policy_for_exit_code(return_code)
    log_file = Path("/var/log/counterpart/counterpart-20240101-000000.log")
    return CloneResult(
        return_code=return_code,
        outcome=policy.outcome,
        exit_code=policy.exit_code,
        paths=RunPaths(
            log_file=log_file,
            error_log_file=log_file.with_suffix(".log.error"),
            stats_file=Path("/Volumes/B/.counterpart.stats"),
            completion_marker=Path("/Volumes/B/.counterpart.done"),
            error_marker=Path("/Volumes/B/.counterpart.error"),
        ),
        stats_written=policy.write_stats,
        marker_written=policy.write_completion_marker,
    )


def setup_mocks(
    mock_config: MagicMock,
    mock_run_clone: MagicMock,
    mock_is_root: MagicMock,
    return_code: int = 0,
) -> None:
    """共通のモックセットアップ（root で実行、デフォルト設定）。"""
    mock_config.return_value = CounterpartConfig()
    mock_run_clone.return_value = make_clone_result(return_code)
    mock_is_root.return_value = True


