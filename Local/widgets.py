"""
Secure Diary Shared Widgets
============================

Small building blocks used by every desktop tab:
  - StatusLabel: coloured one-line feedback under a tab's actions
  - WorkerSlot: owns at most one background worker at a time
  - DropZone: accepts a single dropped file
"""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QThread, Qt, Signal
from PySide6.QtWidgets import QLabel, QSizePolicy

_LEVEL_COLORS = {
    "success": "#2ecc71",
    "error": "#e74c3c",
    "warning": "#f39c12",
}


class StatusLabel(QLabel):
    """Centered status line; *level* is ``success``, ``error``, ``warning`` or empty."""

    def __init__(self, parent=None):
        super().__init__("", parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumHeight(24)
        self.setWordWrap(True)
        self.show_status("")

    def show_status(self, msg: str, level: str = "") -> None:
        self.setText(msg)
        color = _LEVEL_COLORS.get(level)
        if color:
            self.setStyleSheet(f"padding: 4px 0; color: {color}; font-weight: 600;")
        else:
            self.setStyleSheet("padding: 4px 0; color: #a0a0b8;")


class WorkerSlot:
    """Holds the tab's current worker and disposes of the previous one."""

    def __init__(self):
        self._worker: QThread | None = None

    @property
    def busy(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    def start(self, worker: QThread, on_finished, on_error) -> None:
        self.clear()
        self._worker = worker
        worker.finished.connect(on_finished)
        worker.error.connect(on_error)
        worker.start()

    def clear(self) -> None:
        if self._worker is None:
            return
        if self._worker.isRunning():
            self._worker.wait(2000)
        self._worker.deleteLater()
        self._worker = None


class DropZone(QLabel):
    """
    Dashed drop target for one local file.

    Styled through the ``state`` property (``idle``, ``drag`` or ``loaded``)
    in the application stylesheet.
    """

    file_dropped = Signal(str)

    def __init__(self, prompt: str, parent=None):
        super().__init__(prompt, parent)
        self._prompt = prompt
        self._path: str | None = None
        self.setProperty("class", "dropzone")
        self.setAcceptDrops(True)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumHeight(70)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self._set_state("idle")

    @property
    def path(self) -> str | None:
        return self._path

    def set_file(self, path: str) -> None:
        self._path = path
        self.setText(Path(path).name)
        self._set_state("loaded")

    def _set_state(self, state: str) -> None:
        self.setProperty("state", state)
        # re-evaluate property selectors
        self.style().unpolish(self)
        self.style().polish(self)

    def _rest_state(self) -> None:
        self._set_state("loaded" if self._path else "idle")

    def dragEnterEvent(self, event) -> None:
        urls = event.mimeData().urls()
        if urls and urls[0].isLocalFile():
            event.acceptProposedAction()
            self._set_state("drag")

    def dragLeaveEvent(self, event) -> None:
        self._rest_state()

    def dropEvent(self, event) -> None:
        urls = event.mimeData().urls()
        path = urls[0].toLocalFile() if urls else ""
        if path and os.path.isfile(path):
            self.set_file(path)
            self.file_dropped.emit(path)
        else:
            self._rest_state()
