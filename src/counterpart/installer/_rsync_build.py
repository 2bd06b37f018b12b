"""パッチ適用済み rsync のビルドとインストール。

rsync のソースとパッチ集をダウンロードし、macOS のファイルフラグ・作成日時・
HFS+ 圧縮を扱うパッチを当ててビルドする。
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tarfile
from pathlib import Path
from typing import Final

import requests

from counterpart.errors import CounterpartError
from counterpart.models.exit_code import ExitCode

logger = logging.getLogger(__name__)


class InstallError(CounterpartError):
    """rsync のダウンロード・ビルド・インストールのいずれかのステップが失敗した。"""

    default_exit_code = ExitCode.INSTALL_FAILED


RSYNC_SOURCE_URL: Final[str] = "https://download.samba.org/pub/rsync/src/"
DEFAULT_RSYNC_VERSION: Final[str] = "3.0.9"
DEFAULT_PREFIX: Final[Path] = Path("/usr/local")

REQUIRED_PATCHES: Final[tuple[str, ...]] = (
    "fileflags.diff",
    "crtimes.diff",
    "hfs-compression.diff",
)
"""counterpart の rsync オプションが依存するパッチ。適用順。"""

_DOWNLOAD_TIMEOUT_SECONDS: Final[int] = 60
_DOWNLOAD_CHUNK_SIZE: Final[int] = 64 * 1024


def source_archive_name(version: str) -> str:
    return f"rsync-{version}.tar.gz"


def patches_archive_name(version: str) -> str:
    return f"rsync-patches-{version}.tar.gz"


def download(url: str, destination: Path) -> Path:
    """url を destination にダウンロードする。

    Raises:
        InstallError: HTTP エラー・接続エラー・書き込みエラーの場合。
    """
    logger.info("Downloading %s", url)
    try:
        with requests.get(url, stream=True, timeout=_DOWNLOAD_TIMEOUT_SECONDS) as resp:
            resp.raise_for_status()
            with destination.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=_DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
    except requests.RequestException as e:
        raise InstallError(
            f"Couldn't download {url}: {e}\n"
            "Check the network connection and the rsync version."
        ) from e
    except OSError as e:
        raise InstallError(f"Cannot write {destination}: {e}") from e
    return destination


def extract(archive: Path, into: Path) -> None:
    """tar.gz を into に展開する。

    Raises:
        InstallError: アーカイブが壊れている、または展開できない場合。
    """
    logger.info("Extracting %s", archive.name)
    try:
        with tarfile.open(archive, "r:gz") as tar:
            tar.extractall(into, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise InstallError(f"Cannot extract {archive}: {e}") from e


def _run_step(cmd: list[str], cwd: Path) -> None:
    """ビルドの1ステップを実行する。出力はそのまま端末に流す。

    Raises:
        InstallError: コマンドが見つからない、または非ゼロで終了した場合。
    """
    logger.info("Running: %s", " ".join(cmd))
    try:
        subprocess.run(cmd, cwd=cwd, check=True)
    except FileNotFoundError:
        raise InstallError(
            f"{cmd[0]} not found. Install the Xcode command line tools first "
            "(xcode-select --install)."
        ) from None
    except subprocess.CalledProcessError as e:
        raise InstallError(
            f"'{' '.join(cmd)}' failed with exit code {e.returncode}."
        ) from e


def apply_patches(source_dir: Path, patches: tuple[str, ...] = REQUIRED_PATCHES) -> None:
    """source_dir/patches/ のパッチを ``patch -p1`` で順に適用する。

    Raises:
        InstallError: パッチファイルがない、または適用に失敗した場合。
    """
    patch_dir = source_dir / "patches"
    for name in patches:
        patch_file = patch_dir / name
        if not patch_file.is_file():
            raise InstallError(f"Patch not found: {patch_file}")
        _run_step(["patch", "-p1", "-i", str(patch_file)], source_dir)


def build(source_dir: Path, prefix: Path) -> None:
    """prepare-source, configure, make を実行する。"""
    _run_step(["./prepare-source"], source_dir)
    _run_step(["./configure", f"--prefix={prefix}"], source_dir)
    _run_step(["make"], source_dir)


def install(source_dir: Path) -> None:
    """make install を実行する。root でなければ sudo を使う。"""
    cmd = ["make", "install"]
    if os.geteuid() != 0:
        cmd = ["sudo", *cmd]
    _run_step(cmd, source_dir)


def install_patched_rsync(
    work_dir: Path,
    version: str = DEFAULT_RSYNC_VERSION,
    prefix: Path = DEFAULT_PREFIX,
    base_url: str = RSYNC_SOURCE_URL,
    keep: bool = False,
) -> Path:
    """パッチ適用済み rsync をダウンロード・ビルド・インストールする。

    Args:
        work_dir: ダウンロードとビルドに使う作業ディレクトリ。
        version: rsync のバージョン。
        prefix: インストール先プレフィックス。
        base_url: ソースアーカイブの配布 URL。
        keep: True の場合、成功後も作業ファイルを削除しない。

    Returns:
        インストールされた rsync バイナリのパス。

    Raises:
        InstallError: いずれかのステップが失敗した場合。
    """
    try:
        work_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallError(f"Cannot create work directory {work_dir}: {e}") from e
    source_dir = work_dir / f"rsync-{version}"
    archives = [
        download(f"{base_url}{name}", work_dir / name)
        for name in (source_archive_name(version), patches_archive_name(version))
    ]
    for archive in archives:
        extract(archive, work_dir)
    if not source_dir.is_dir():
        raise InstallError(f"Folder not found after extraction: {source_dir}")

    logger.info("Compiling rsync %s", version)
    apply_patches(source_dir)
    build(source_dir, prefix)

    logger.info("Installing to %s (as root)", prefix)
    install(source_dir)

    if not keep:
        logger.info("Cleaning up %s", work_dir)
        shutil.rmtree(source_dir, ignore_errors=True)
        for archive in archives:
            archive.unlink(missing_ok=True)

    return prefix / "bin" / "rsync"
