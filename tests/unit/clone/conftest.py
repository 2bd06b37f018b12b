"""clone テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from counterpart.clone._artifacts import create_log_files, make_run_paths
from counterpart.models.clone import RunPaths
from counterpart.models.config import CounterpartConfig

FIXED_NOW = datetime(2024, 5, 17, 3, 4, 5)

STATS_OUTPUT = """\
>f+++++++++ etc/hosts
Number of files: 1,024 (reg: 900, dir: 124)
Number of created files: 1
Total file size: 2.05G bytes
Total transferred file size: 1.23K bytes

sent 4.56K bytes  received 78 bytes  9.28K bytes/sec
total size is 2.05G  speedup is 442,015.43
"""


def make_executable(path: Path, body: str) -> Path:
    """/bin/sh スクリプトを作成し実行権限を付与する。"""
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


@pytest.fixture
def volumes(tmp_path: Path) -> tuple[Path, Path]:
    """ソースと宛先ディレクトリ。"""
    source = tmp_path / "source"
    destination = tmp_path / "destination"
    source.mkdir()
    destination.mkdir()
    return source, destination


@pytest.fixture
def run_paths(tmp_path: Path, volumes: tuple[Path, Path]) -> RunPaths:
    """ログファイル作成済みの RunPaths。"""
    _, destination = volumes
    paths = make_run_paths(tmp_path / "logs", destination, FIXED_NOW)
    create_log_files(paths)
    return paths


@pytest.fixture
def config(tmp_path: Path) -> CounterpartConfig:
    """実行時ファイルを tmp_path 配下に置く設定。"""
    return CounterpartConfig(
        rsync_path="/usr/bin/rsync",
        log_dir=tmp_path / "logs",
        lock_file=tmp_path / "run" / "counterpart.lock",
        backup_dir=tmp_path / "backups",
        spotlight_delay_seconds=0,
    )
