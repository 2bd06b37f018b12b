"""counterpart-install-rsync コマンドのテスト。"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from counterpart.cli._install import install_app
from counterpart.installer import InstallError
from counterpart.models.exit_code import ExitCode

PATCH_INSTALL = "counterpart.cli._install.install_patched_rsync"

runner = CliRunner()


class TestInstallRsync:
    @patch(PATCH_INSTALL, return_value=Path("/usr/local/bin/rsync"))
    def test_defaults(self, mock_install: MagicMock, tmp_path: Path) -> None:
        result = runner.invoke(install_app, ["--work-dir", str(tmp_path)])
        assert result.exit_code == 0
        mock_install.assert_called_once_with(
            tmp_path,
            version="3.0.9",
            prefix=Path("/usr/local"),
            base_url="https://download.samba.org/pub/rsync/src/",
            keep=False,
        )

    @patch(PATCH_INSTALL, return_value=Path("/opt/bin/rsync"))
    def test_options(self, mock_install: MagicMock, tmp_path: Path) -> None:
        result = runner.invoke(
            install_app,
            [
                "--work-dir",
                str(tmp_path),
                "--rsync-version",
                "3.1.0",
                "--prefix",
                "/opt",
                "--base-url",
                "https://mirror.example.org/rsync",
                "--keep",
            ],
        )
        assert result.exit_code == 0
        kwargs = mock_install.call_args.kwargs
        assert kwargs["version"] == "3.1.0"
        assert kwargs["prefix"] == Path("/opt")
        assert kwargs["base_url"] == "https://mirror.example.org/rsync/"
        assert kwargs["keep"] is True

    @patch(PATCH_INSTALL, side_effect=InstallError("Couldn't download rsync"))
    def test_failure_exits_install_failed(
        self, _install: MagicMock, tmp_path: Path
    ) -> None:
        result = runner.invoke(install_app, ["--work-dir", str(tmp_path)])
        assert result.exit_code == ExitCode.INSTALL_FAILED
