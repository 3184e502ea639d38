"""
Secure Diary Background Workers
================================

QThread-based workers so key generation and envelope encryption never block
the UI. Each worker runs one operation and reports through signals:

  - ``finished`` with the result
  - ``error`` with a user-facing message

Decryption failures are reported with one generic message whatever the
underlying cause (truncated envelope, wrong key, tampered data).
"""

from __future__ import annotations

import logging
import time

from PySide6.QtCore import QThread, Signal

import diary_crypto
import diary_files

logger = logging.getLogger(__name__)

DECRYPT_FAILED = "Decryption failed — check your keys or file integrity."


def _error_message(exc: Exception) -> str:
    if isinstance(exc, diary_crypto.DecryptionError):
        return DECRYPT_FAILED
    return str(exc)


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------


class KeyGenWorker(QThread):
    """Generate an RSA key pair in a background thread."""

    finished = Signal(object)  # KeyPair
    error = Signal(str)

    def run(self) -> None:
        try:
            pair = diary_crypto.generate_keypair()
            self.finished.emit(pair)
        except Exception as exc:
            logger.exception("Key generation failed")
            self.error.emit(_error_message(exc))


# ---------------------------------------------------------------------------
# Entry workers
# ---------------------------------------------------------------------------


class EntryEncryptWorker(QThread):
    """Encrypt a diary entry; emits ``(filename, envelope)``."""

    finished = Signal(str, bytes)
    error = Signal(str)

    def __init__(self, text: str, keypair: diary_crypto.KeyPair, parent=None):
        super().__init__(parent)
        self._text = text
        self._keypair = keypair

    def run(self) -> None:
        try:
            filename, envelope = diary_files.encrypt_entry(self._text, self._keypair)
            self.finished.emit(filename, envelope)
        except Exception as exc:
            logger.warning("Entry encryption failed: %s", type(exc).__name__)
            self.error.emit(_error_message(exc))


# ---------------------------------------------------------------------------
# File workers
# ---------------------------------------------------------------------------


class FileEncryptWorker(QThread):
    """Encrypt a file in a background thread."""

    finished = Signal(str, float)  # (output_path, elapsed_sec)
    error = Signal(str)

    def __init__(
        self,
        input_path: str,
        output_path: str,
        keypair: diary_crypto.KeyPair,
        parent=None,
    ):
        super().__init__(parent)
        self._input_path = input_path
        self._output_path = output_path
        self._keypair = keypair

    def run(self) -> None:
        t0 = time.perf_counter()
        try:
            out = diary_files.encrypt_file(
                self._input_path, self._keypair, self._output_path
            )
            self.finished.emit(str(out), time.perf_counter() - t0)
        except Exception as exc:
            logger.warning("File encryption failed: %s", type(exc).__name__)
            self.error.emit(_error_message(exc))


class FileDecryptWorker(QThread):
    """
    Decrypt a file in a background thread.

    Emits ``(output_path, plaintext, elapsed_sec)``; *plaintext* is only
    filled in for ``.txt`` payloads so the UI can show them.
    """

    finished = Signal(str, bytes, float)
    error = Signal(str)

    def __init__(
        self,
        input_path: str,
        output_path: str,
        keypair: diary_crypto.KeyPair,
        parent=None,
    ):
        super().__init__(parent)
        self._input_path = input_path
        self._output_path = output_path
        self._keypair = keypair

    def run(self) -> None:
        t0 = time.perf_counter()
        try:
            out = diary_files.decrypt_file(
                self._input_path, self._keypair, self._output_path
            )
            text = out.read_bytes() if diary_files.is_text_payload(out.name) else b""
            self.finished.emit(str(out), text, time.perf_counter() - t0)
        except Exception as exc:
            self.error.emit(_error_message(exc))
