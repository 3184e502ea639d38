"""
Secure Diary File Tab
======================

Two side-by-side panels:
  - Encrypt File: any file becomes ``<name>.enc``
  - Decrypt File: ``.enc`` is stripped; decrypted ``.txt`` files such as
    diary entries are also shown inline
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from PySide6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

import diary_files
from diary_keys import DiarySession
from widgets import DropZone, StatusLabel, WorkerSlot
from workers import FileDecryptWorker, FileEncryptWorker


class _FilePanel(QGroupBox):
    """Drop zone, size caption and Browse / action buttons for one direction."""

    def __init__(self, title: str, action: str, file_filter: str, parent=None):
        super().__init__(title, parent)
        self._file_filter = file_filter
        layout = QVBoxLayout(self)

        self.drop = DropZone("Drop a file here or click Browse")
        self.drop.file_dropped.connect(self._show_size)
        layout.addWidget(self.drop)

        self._size_label = QLabel("")
        self._size_label.setStyleSheet("font-size: 11px; color: #a0a0b8;")
        layout.addWidget(self._size_label)

        row = QHBoxLayout()
        self.browse_btn = QPushButton("Browse")
        self.browse_btn.setProperty("class", "secondary")
        self.browse_btn.clicked.connect(self._browse)
        self.action_btn = QPushButton(action)
        self.action_btn.setFixedHeight(36)
        row.addWidget(self.browse_btn)
        row.addStretch()
        row.addWidget(self.action_btn)
        layout.addLayout(row)

    @property
    def path(self) -> str | None:
        return self.drop.path

    def set_busy(self, busy: bool) -> None:
        self.browse_btn.setDisabled(busy)
        self.action_btn.setDisabled(busy)

    def _browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, self.title(), "", self._file_filter)
        if path:
            self.drop.set_file(path)
            self._show_size(path)

    def _show_size(self, path: str) -> None:
        try:
            size = Path(path).stat().st_size
        except OSError:
            self._size_label.setText("")
            return
        self._size_label.setText(diary_files.human_file_size(size))


class FileTab(QWidget):
    """File encryption / decryption tab."""

    def __init__(self, session: DiarySession, parent=None):
        super().__init__(parent)
        self._session = session
        self._jobs = WorkerSlot()
        self._last_output: Path | None = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        panels = QHBoxLayout()
        self._encrypt_panel = _FilePanel("Encrypt File", "Encrypt", "All Files (*)")
        self._encrypt_panel.action_btn.clicked.connect(self._on_encrypt)
        self._decrypt_panel = _FilePanel(
            "Decrypt File", "Decrypt", "Encrypted Files (*.enc);;All Files (*)"
        )
        self._decrypt_panel.action_btn.clicked.connect(self._on_decrypt)
        panels.addWidget(self._encrypt_panel)
        panels.addWidget(self._decrypt_panel)
        layout.addLayout(panels)

        self._text_group = QGroupBox("Decrypted Text")
        text_layout = QVBoxLayout(self._text_group)
        self._decrypted_text = QPlainTextEdit()
        self._decrypted_text.setReadOnly(True)
        text_layout.addWidget(self._decrypted_text)
        self._text_group.setVisible(False)
        layout.addWidget(self._text_group, 1)

        footer = QHBoxLayout()
        self._status = StatusLabel()
        self._open_folder_btn = QPushButton("Open Folder")
        self._open_folder_btn.setProperty("class", "success")
        self._open_folder_btn.setVisible(False)
        self._open_folder_btn.clicked.connect(self._open_output_folder)
        footer.addWidget(self._status, 1)
        footer.addWidget(self._open_folder_btn)
        layout.addLayout(footer)
        layout.addStretch()

    # ----- Encrypt -----

    def _on_encrypt(self) -> None:
        source = self._encrypt_panel.path
        if not source:
            self._status.show_status("Choose a file to encrypt first.", "error")
            return
        target = self._ask_save(
            "Save Encrypted File", source, diary_files.encrypted_filename(Path(source).name)
        )
        if not target:
            return
        self._begin("Encrypting...")
        self._jobs.start(
            FileEncryptWorker(source, target, self._session.keypair, parent=self),
            self._on_encrypt_done,
            self._on_failed,
        )

    def _on_encrypt_done(self, output_path: str, elapsed: float) -> None:
        self._finish(output_path, f"Encrypted in {elapsed:.2f}s")

    # ----- Decrypt -----

    def _on_decrypt(self) -> None:
        source = self._decrypt_panel.path
        if not source:
            self._status.show_status("Choose a .enc file to decrypt first.", "error")
            return
        target = self._ask_save(
            "Save Decrypted File", source, diary_files.decrypted_filename(Path(source).name)
        )
        if not target:
            return
        self._begin("Decrypting...")
        self._jobs.start(
            FileDecryptWorker(source, target, self._session.keypair, parent=self),
            self._on_decrypt_done,
            self._on_failed,
        )

    def _on_decrypt_done(self, output_path: str, text: bytes, elapsed: float) -> None:
        if diary_files.is_text_payload(output_path):
            self._decrypted_text.setPlainText(diary_files.decode_text(text))
            self._text_group.setVisible(True)
        self._finish(output_path, f"Decrypted in {elapsed:.2f}s")

    # ----- Common -----

    def _ask_save(self, title: str, source: str, default_name: str) -> str:
        suggested = str(Path(source).with_name(default_name))
        path, _ = QFileDialog.getSaveFileName(self, title, suggested, "All Files (*)")
        return path

    def _begin(self, message: str) -> None:
        self._set_busy(True)
        self._text_group.setVisible(False)
        self._open_folder_btn.setVisible(False)
        self._status.show_status(message, "warning")

    def _finish(self, output_path: str, message: str) -> None:
        self._last_output = Path(output_path)
        self._status.show_status(f"{message}  |  {self._last_output.name}", "success")
        self._open_folder_btn.setVisible(True)
        self._set_busy(False)

    def _on_failed(self, msg: str) -> None:
        self._status.show_status(msg, "error")
        self._set_busy(False)

    def _set_busy(self, busy: bool) -> None:
        self._encrypt_panel.set_busy(busy)
        self._decrypt_panel.set_busy(busy)

    def _open_output_folder(self) -> None:
        if self._last_output is None:
            return
        folder = str(self._last_output.parent)
        if sys.platform == "win32":
            command = None
        elif sys.platform == "darwin":
            command = ["open", folder]
        else:
            command = ["xdg-open", folder]
        try:
            if command is None:
                os.startfile(folder)
            else:
                subprocess.Popen(command)
        except OSError:
            self._status.show_status(f"Could not open: {folder}", "error")
