"""
Secure Diary Main Window
=========================

Tabbed main window with:
  - Diary Entry (write and save encrypted)
  - File Encryption / Decryption
  - Key Management

Entry and Files stay disabled until a key pair is loaded.
"""

from __future__ import annotations

import logging

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from diary_config import APP_NAME, APP_VERSION
from diary_keys import DiarySession, FileKeyStore, KeyStoreError
from file_tab import FileTab
from key_tab import KeyTab
from text_tab import TextTab

logger = logging.getLogger(__name__)

_ENTRY_INDEX, _FILES_INDEX, _KEYS_INDEX = 0, 1, 2


class DiaryMainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, session: DiarySession | None = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"{APP_NAME} — Encrypted Journal")
        self.setMinimumSize(580, 420)
        self.resize(960, 680)

        if session is None:
            session = DiarySession(FileKeyStore())
        self.session = session
        self._restore_error = ""
        try:
            self.session.restore()
        except KeyStoreError as e:
            logger.warning("Could not restore saved keys: %s", e)
            self._restore_error = str(e)

        self._setup_ui()
        self._setup_menubar()
        self._setup_statusbar()
        self._on_keys_changed()

    # ----- UI setup -----

    def _setup_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(10, 8, 10, 4)
        layout.setSpacing(6)

        # Header
        header_layout = QHBoxLayout()
        header_layout.setSpacing(12)

        title = QLabel(APP_NAME.upper())
        title.setStyleSheet(
            "font-size: 22px; font-weight: 800; letter-spacing: 4px;"
            "color: #eaeaea; padding: 0;"
        )
        header_layout.addWidget(title)

        subtitle = QLabel("RSA + AES-GCM encrypted journal")
        subtitle.setStyleSheet("font-size: 12px; color: #a0a0b8; padding-top: 8px;")
        header_layout.addWidget(subtitle)
        header_layout.addStretch()

        version_label = QLabel(f"v{APP_VERSION}")
        version_label.setStyleSheet("font-size: 11px; color: #6c6c80; padding-top: 8px;")
        header_layout.addWidget(version_label)

        layout.addLayout(header_layout)

        self.tabs = QTabWidget()
        self.tabs.setDocumentMode(True)

        self.text_tab = TextTab(self.session)
        self.file_tab = FileTab(self.session)
        self.key_tab = KeyTab(self.session)
        self.key_tab.keys_changed.connect(self._on_keys_changed)

        self.tabs.addTab(self.text_tab, "  Entry  ")
        self.tabs.addTab(self.file_tab, "  Files  ")
        self.tabs.addTab(self.key_tab, "  Keys  ")

        layout.addWidget(self.tabs)

    def _setup_menubar(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menubar.addMenu("&View")
        self._view_actions = []
        for index, (label, shortcut) in enumerate(
            (("&Entry Tab", "Ctrl+1"), ("&Files Tab", "Ctrl+2"), ("&Keys Tab", "Ctrl+3"))
        ):
            action = QAction(label, self)
            action.setShortcut(shortcut)
            action.triggered.connect(lambda _=False, i=index: self.tabs.setCurrentIndex(i))
            view_menu.addAction(action)
            self._view_actions.append(action)

        help_menu = menubar.addMenu("&Help")
        about_action = QAction(f"&About {APP_NAME}", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _setup_statusbar(self) -> None:
        self._status = QStatusBar()
        self.setStatusBar(self._status)

    # ----- State -----

    def _on_keys_changed(self) -> None:
        has_keys = self.session.has_keys
        for index in (_ENTRY_INDEX, _FILES_INDEX):
            self.tabs.setTabEnabled(index, has_keys)
            self._view_actions[index].setEnabled(has_keys)

        if has_keys:
            self._status.showMessage("Keys loaded")
        elif self._restore_error:
            self._status.showMessage(f"Saved keys could not be loaded: {self._restore_error}")
            self.tabs.setCurrentIndex(_KEYS_INDEX)
        else:
            self._status.showMessage("No keys loaded — generate or import a key pair")
            self.tabs.setCurrentIndex(_KEYS_INDEX)
        self._restore_error = ""

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<h2>{APP_NAME}</h2>"
            f"<p>Desktop Edition v{APP_VERSION}</p>"
            "<p>Entries are encrypted with a fresh AES-256-GCM key, "
            "wrapped with RSA-2048 OAEP (SHA-256).</p>"
            "<p>Export your keys: without the private key nothing can be decrypted.</p>",
        )
