"""
Secure Diary Key Tab
=====================

Manage the active RSA key pair:
  - Generate a new 2048-bit key pair
  - Import from a ``diary-keys.json`` file or by pasting both keys
  - Export to ``diary-keys.json``
  - Logout (clears the stored pair)
"""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

import diary_crypto
from diary_keys import KEY_FILE_NAME, DiarySession, KeyStoreError, key_fingerprint
from widgets import StatusLabel, WorkerSlot
from workers import KeyGenWorker


class KeyTab(QWidget):
    """Key management tab."""

    keys_changed = Signal()

    def __init__(self, session: DiarySession, parent=None):
        super().__init__(parent)
        self._session = session
        self._jobs = WorkerSlot()
        self._setup_ui()
        self._refresh()

    def _setup_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)
        scroll_content = QWidget()
        layout = QVBoxLayout(scroll_content)
        layout.setSpacing(12)
        scroll.setWidget(scroll_content)
        outer.addWidget(scroll)

        # ----- Active key pair -----
        active_group = QGroupBox("Active Key Pair")
        active_layout = QVBoxLayout(active_group)

        self._active_label = QLabel("")
        self._active_label.setWordWrap(True)
        active_layout.addWidget(self._active_label)

        active_row = QHBoxLayout()
        self._copy_pub_btn = QPushButton("Copy Public Key")
        self._copy_pub_btn.setProperty("class", "secondary")
        self._copy_pub_btn.clicked.connect(self._on_copy_public)
        self._export_btn = QPushButton("Export Keys")
        self._export_btn.clicked.connect(self._on_export)
        self._logout_btn = QPushButton("Logout")
        self._logout_btn.setProperty("class", "danger")
        self._logout_btn.clicked.connect(self._on_logout)
        active_row.addWidget(self._copy_pub_btn)
        active_row.addWidget(self._export_btn)
        active_row.addStretch()
        active_row.addWidget(self._logout_btn)
        active_layout.addLayout(active_row)

        layout.addWidget(active_group)

        # ----- Generate / Import -----
        setup_group = QGroupBox("Generate or Import Keys")
        setup_layout = QVBoxLayout(setup_group)
        setup_layout.setSpacing(10)

        gen_row = QHBoxLayout()
        gen_desc = QLabel("Generate a new RSA-2048 key pair:")
        gen_desc.setStyleSheet("color: #a0a0b8; font-size: 12px;")
        self._gen_btn = QPushButton("Generate New Keys")
        self._gen_btn.clicked.connect(self._on_generate)
        gen_row.addWidget(gen_desc)
        gen_row.addStretch()
        gen_row.addWidget(self._gen_btn)
        setup_layout.addLayout(gen_row)

        file_row = QHBoxLayout()
        file_desc = QLabel(f"Import a {KEY_FILE_NAME} file:")
        file_desc.setStyleSheet("color: #a0a0b8; font-size: 12px;")
        self._import_file_btn = QPushButton("Import Keys from File")
        self._import_file_btn.setProperty("class", "secondary")
        self._import_file_btn.clicked.connect(self._on_import_file)
        file_row.addWidget(file_desc)
        file_row.addStretch()
        file_row.addWidget(self._import_file_btn)
        setup_layout.addLayout(file_row)

        sep = QLabel("")
        sep.setFixedHeight(1)
        sep.setStyleSheet("background-color: #2a2a4a;")
        setup_layout.addWidget(sep)

        manual_desc = QLabel("Or paste both keys (Base64 or PEM):")
        manual_desc.setStyleSheet("color: #a0a0b8; font-size: 12px;")
        setup_layout.addWidget(manual_desc)

        self._public_input = QPlainTextEdit()
        self._public_input.setPlaceholderText("Paste your public key here...")
        self._public_input.setFixedHeight(80)
        setup_layout.addWidget(self._public_input)

        self._private_input = QPlainTextEdit()
        self._private_input.setPlaceholderText("Paste your private key here...")
        self._private_input.setFixedHeight(80)
        setup_layout.addWidget(self._private_input)

        manual_row = QHBoxLayout()
        manual_row.addStretch()
        self._import_btn = QPushButton("Import Keys")
        self._import_btn.setProperty("class", "secondary")
        self._import_btn.clicked.connect(self._on_import_manual)
        manual_row.addWidget(self._import_btn)
        setup_layout.addLayout(manual_row)

        layout.addWidget(setup_group)
        layout.addStretch()

        self._status = StatusLabel()
        layout.addWidget(self._status)

    # ----- State -----

    def _refresh(self) -> None:
        has_keys = self._session.has_keys
        if has_keys:
            pair = self._session.keypair
            self._active_label.setText(
                f"RSA-{pair.load_public_key().key_size} key pair loaded\n"
                f"Fingerprint: {key_fingerprint(pair.public_key)}"
            )
        else:
            self._active_label.setText(
                "No keys loaded. Generate new keys or import existing ones."
            )
        self._copy_pub_btn.setEnabled(has_keys)
        self._export_btn.setEnabled(has_keys)
        self._logout_btn.setEnabled(has_keys)

    def _keys_replaced(self, message: str) -> None:
        self._public_input.clear()
        self._private_input.clear()
        self._refresh()
        self._status.show_status(message, "success")
        self.keys_changed.emit()

    def _confirm_replace(self) -> bool:
        if not self._session.has_keys:
            return True
        answer = QMessageBox.question(
            self,
            "Replace Keys",
            "This replaces the current key pair. Entries encrypted with it can "
            "only be read again if you exported it.\n\nContinue?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    # ----- Actions -----

    def _on_generate(self) -> None:
        if self._jobs.busy or not self._confirm_replace():
            return
        self._gen_btn.setDisabled(True)
        self._status.show_status("Generating RSA key pair...", "warning")
        self._jobs.start(KeyGenWorker(self), self._on_generate_done, self._on_generate_error)

    def _on_generate_done(self, pair: diary_crypto.KeyPair) -> None:
        self._gen_btn.setDisabled(False)
        try:
            self._session.activate(pair)
        except KeyStoreError as e:
            self._status.show_status(f"Could not save keys: {e}", "error")
            return
        self._keys_replaced("New key pair generated. Export it to keep a backup!")

    def _on_generate_error(self, msg: str) -> None:
        self._gen_btn.setDisabled(False)
        self._status.show_status(f"Error: {msg}", "error")

    def _on_import_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Import Keys", "", "Key Files (*.json);;All Files (*)"
        )
        if not path or not self._confirm_replace():
            return
        try:
            self._session.import_key_file(Path(path).read_bytes())
        except (diary_crypto.InvalidKeyFormatError, OSError):
            self._status.show_status("Invalid key file. Please select a valid key file.", "error")
            return
        except KeyStoreError as e:
            self._status.show_status(f"Could not save keys: {e}", "error")
            return
        self._keys_replaced(f"Keys imported from {Path(path).name}.")

    def _on_import_manual(self) -> None:
        public_text = self._public_input.toPlainText().strip()
        private_text = self._private_input.toPlainText().strip()
        if not public_text or not private_text:
            self._status.show_status("Please provide both public and private keys.", "error")
            return
        if not self._confirm_replace():
            return
        try:
            self._session.import_keys(public_text, private_text)
        except diary_crypto.InvalidKeyFormatError:
            self._status.show_status(
                "Invalid key format. Please check your keys and try again.", "error"
            )
            return
        except KeyStoreError as e:
            self._status.show_status(f"Could not save keys: {e}", "error")
            return
        self._keys_replaced("Keys imported successfully.")

    def _on_copy_public(self) -> None:
        public_b64, _ = diary_crypto.export_keypair(self._session.keypair)
        QApplication.clipboard().setText(public_b64)
        self._status.show_status("Public key copied to clipboard!", "success")

    def _on_export(self) -> bool:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Keys", KEY_FILE_NAME, "Key Files (*.json)"
        )
        if not path:
            return False
        try:
            Path(path).write_text(self._session.export_key_file(), "utf-8")
        except OSError as e:
            self._status.show_status(f"Export failed: {e}", "error")
            return False
        self._status.show_status(f"Keys exported to {Path(path).name}.", "success")
        return True

    def _on_logout(self) -> None:
        answer = QMessageBox.question(
            self,
            "Logout",
            "Would you like to export your keys before logging out?",
            QMessageBox.StandardButton.Yes
            | QMessageBox.StandardButton.No
            | QMessageBox.StandardButton.Cancel,
        )
        if answer == QMessageBox.StandardButton.Cancel:
            return
        if answer == QMessageBox.StandardButton.Yes and not self._on_export():
            return
        try:
            self._session.logout()
        except KeyStoreError as e:
            self._status.show_status(f"Logout failed: {e}", "error")
            return
        self._refresh()
        self._status.show_status("Logged out. Keys removed from this device.", "")
        self.keys_changed.emit()

