"""
Secure Diary Configuration
===========================

Config directory resolution, environment overrides and logging setup shared
by the Web and Desktop editions.

Environment variables:
  - ``SECURE_DIARY_HOME``      — override the config directory
  - ``SECURE_DIARY_LOG_LEVEL`` — logging level name (default ``INFO``)
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from pathlib import Path

APP_NAME = "Secure Diary"
APP_VERSION = "1.0.0"

ENV_HOME = "SECURE_DIARY_HOME"
ENV_LOG_LEVEL = "SECURE_DIARY_LOG_LEVEL"

_DIR_NAME = "SecureDiary"
_KEYS_FILE = "keys.json"


# ---------------------------------------------------------------------------
# Config directory
# ---------------------------------------------------------------------------

def config_dir() -> Path:
    """Return the OS-appropriate config directory, creating it if needed."""
    override = os.environ.get(ENV_HOME)
    if override:
        config = Path(override).expanduser()
    else:
        if platform.system() == "Windows":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif platform.system() == "Darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        config = base / _DIR_NAME
    config.mkdir(parents=True, exist_ok=True)
    return config


def keys_path() -> Path:
    """Where the desktop edition keeps the active key pair."""
    return config_dir() / _KEYS_FILE


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def log_level() -> int:
    name = os.environ.get(ENV_LOG_LEVEL, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | None = None) -> None:
    # Configure root logger once; keep output simple for terminals.
    logging.basicConfig(
        level=log_level() if level is None else level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
