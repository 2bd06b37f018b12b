"""counterpart-install-rsync コマンド。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from counterpart._log import configure_console_logging
from counterpart.installer import (
    DEFAULT_PREFIX,
    DEFAULT_RSYNC_VERSION,
    InstallError,
    install_patched_rsync,
)
from counterpart.installer._rsync_build import RSYNC_SOURCE_URL

logger = logging.getLogger(__name__)

install_app = typer.Typer(
    name="counterpart-install-rsync",
    help="Download, patch, build and install the rsync used by counterpart.",
    add_completion=False,
)


@install_app.command(context_settings={"help_option_names": ["-h", "--help"]})
def install_rsync(
    rsync_version: Annotated[
        str, typer.Option("--rsync-version", help="rsync release to build.")
    ] = DEFAULT_RSYNC_VERSION,
    prefix: Annotated[
        Path, typer.Option("--prefix", help="Installation prefix.")
    ] = DEFAULT_PREFIX,
    work_dir: Annotated[
        Path | None,
        typer.Option("--work-dir", help="Build directory (default: current directory)."),
    ] = None,
    base_url: Annotated[
        str, typer.Option("--base-url", help="Download location of the rsync sources.")
    ] = RSYNC_SOURCE_URL,
    keep: Annotated[
        bool, typer.Option("--keep", help="Keep downloaded and built files.")
    ] = False,
) -> None:
    """Build rsync with the fileflags, crtimes and hfs-compression patches."""
    configure_console_logging()
    effective_work_dir = work_dir if work_dir is not None else Path.cwd()
    try:
        binary = install_patched_rsync(
            effective_work_dir,
            version=rsync_version,
            prefix=prefix,
            base_url=base_url if base_url.endswith("/") else f"{base_url}/",
            keep=keep,
        )
    except InstallError as e:
        logger.error("%s", e)
        raise typer.Exit(code=e.exit_code) from None
    logger.info("Installed %s", binary)


def main() -> None:
    """counterpart-install-rsync のエントリポイント。"""
    install_app()
