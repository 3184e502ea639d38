"""
Secure Diary Entry Tab
=======================

Write a diary entry and save it encrypted as
``diary-entry-<timestamp>.txt.enc``.
"""

from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from diary_keys import DiarySession
from widgets import StatusLabel, WorkerSlot
from workers import EntryEncryptWorker


class TextTab(QWidget):
    """Diary entry tab."""

    def __init__(self, session: DiarySession, parent=None):
        super().__init__(parent)
        self._session = session
        self._jobs = WorkerSlot()
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        header = QLabel("Text Entry")
        header.setStyleSheet("font-weight: 600; font-size: 14px;")
        layout.addWidget(header)

        self._entry = QPlainTextEdit()
        self._entry.setPlaceholderText("Dear Diary...")
        self._entry.textChanged.connect(self._on_text_changed)
        layout.addWidget(self._entry, 1)

        footer = QHBoxLayout()
        self._counter = QLabel("")
        self._counter.setStyleSheet("font-size: 11px; color: #a0a0b8;")
        self._save_btn = QPushButton("Save Entry")
        self._save_btn.setFixedHeight(38)
        self._save_btn.clicked.connect(self._on_save)
        footer.addWidget(self._counter)
        footer.addStretch()
        footer.addWidget(self._save_btn)
        layout.addLayout(footer)

        self._status = StatusLabel()
        layout.addWidget(self._status)
        self._on_text_changed()

    def _on_text_changed(self) -> None:
        text = self._entry.toPlainText()
        words = len(text.split())
        self._counter.setText(f"{words:,} words | {len(text):,} chars")
        self._save_btn.setEnabled(bool(text))

    # ----- Save -----

    def _on_save(self) -> None:
        text = self._entry.toPlainText()
        if not text or self._jobs.busy:
            return
        if not self._session.has_keys:
            self._status.show_status("No keys loaded. Go to the Keys tab first.", "error")
            return

        self._save_btn.setDisabled(True)
        self._status.show_status("Encrypting entry...", "warning")
        self._jobs.start(
            EntryEncryptWorker(text, self._session.keypair, parent=self),
            self._on_encrypted,
            self._on_failed,
        )

    def _on_encrypted(self, filename: str, envelope: bytes) -> None:
        self._save_btn.setDisabled(False)
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Encrypted Entry", filename, "Encrypted Files (*.enc)"
        )
        if not path:
            self._status.show_status("Entry not saved.", "warning")
            return
        try:
            Path(path).write_bytes(envelope)
        except OSError as e:
            self._status.show_status(f"Could not write {Path(path).name}: {e}", "error")
            return
        self._entry.clear()
        self._status.show_status(f"Saved as: {Path(path).name}", "success")

    def _on_failed(self, msg: str) -> None:
        self._save_btn.setDisabled(False)
        self._status.show_status(f"Error encrypting content: {msg}", "error")
