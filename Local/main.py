"""Desktop entry point: ``python Local/main.py``."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from diary_config import APP_NAME, APP_VERSION, configure_logging
from main_window import DiaryMainWindow
from styles import STYLESHEET


def create_application(argv: list[str]) -> QApplication:
    """Build the QApplication with the diary's identity, font and theme."""
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )
    app = QApplication(argv)
    for setter in (app.setApplicationName, app.setOrganizationName):
        setter(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    font = QFont("Segoe UI", 10)
    font.setStyleStrategy(QFont.StyleStrategy.PreferAntialias)
    app.setFont(font)
    app.setStyleSheet(STYLESHEET)
    return app


def main() -> int:
    configure_logging()
    app = create_application(sys.argv)
    window = DiaryMainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
