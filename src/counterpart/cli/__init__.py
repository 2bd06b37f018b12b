"""counterpart CLI パッケージ。

公開 API:
    app: counterpart の Typer アプリケーションインスタンス。
    main: counterpart のエントリポイント。
    install_app: counterpart-install-rsync の Typer アプリケーションインスタンス。
    install_main: counterpart-install-rsync のエントリポイント。
"""

from counterpart.cli._app import app, main
from counterpart.cli._install import install_app
from counterpart.cli._install import main as install_main

__all__ = ["app", "install_app", "install_main", "main"]
