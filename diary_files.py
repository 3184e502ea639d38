"""
Secure Diary File Helpers
==========================

Naming rules and whole-file encrypt / decrypt used by both editions:

  * diary entries are saved as ``diary-entry-<epoch ms>.txt.enc``
  * encrypted files get an ``.enc`` suffix, decrypting strips it
  * decrypted ``.txt`` payloads are shown as text, anything else is saved
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Tuple, Union

import diary_crypto

logger = logging.getLogger(__name__)

ENCRYPTED_SUFFIX = ".enc"
ENTRY_PREFIX = "diary-entry-"
TEXT_SUFFIX = ".txt"

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

def entry_filename(timestamp_ms: Optional[int] = None) -> str:
    """Plaintext name of a diary entry, e.g. ``diary-entry-1718000000000.txt``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{ENTRY_PREFIX}{timestamp_ms}{TEXT_SUFFIX}"


def encrypted_filename(name: str) -> str:
    return name + ENCRYPTED_SUFFIX


def decrypted_filename(name: str) -> str:
    """
    Strip ``.enc`` if present, else prepend ``decrypted_``.
    """
    if name.endswith(ENCRYPTED_SUFFIX) and len(name) > len(ENCRYPTED_SUFFIX):
        return name[: -len(ENCRYPTED_SUFFIX)]
    return "decrypted_" + name


def is_text_payload(name: str) -> bool:
    """True when a decrypted file should be displayed rather than saved."""
    return name.lower().endswith(TEXT_SUFFIX)


def decode_text(plaintext: bytes) -> str:
    return plaintext.decode("utf-8", errors="replace")


def human_file_size(size_bytes: int) -> str:
    """Convert a byte count to a short label such as '1.5 MB'."""
    if size_bytes < 0:
        return "0 B"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in ("KB", "MB", "GB", "TB"):
        size /= 1024.0
        if size < 1024.0:
            break
    return f"{size:.1f} {unit}"


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

def encrypt_entry(
    text: str,
    public_key: diary_crypto.PublicKeyLike,
    timestamp_ms: Optional[int] = None,
) -> Tuple[str, bytes]:
    """
    Encrypt a diary entry.

    Returns ``(filename, envelope)`` where *filename* ends in ``.txt.enc``.
    """
    if not text:
        raise ValueError("Diary entry is empty.")
    envelope = diary_crypto.encrypt(text.encode("utf-8"), public_key)
    return encrypted_filename(entry_filename(timestamp_ms)), envelope


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def encrypt_file(
    input_path: PathLike,
    public_key: diary_crypto.PublicKeyLike,
    output_path: Optional[PathLike] = None,
) -> Path:
    """
    Encrypt a whole file into a single envelope.

    The output defaults to ``<input>.enc`` next to the input and is only
    written once encryption has succeeded.
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_name(encrypted_filename(input_path.name))
    output_path = Path(output_path)

    envelope = diary_crypto.encrypt(input_path.read_bytes(), public_key)
    output_path.write_bytes(envelope)
    logger.info("Encrypted %s -> %s", input_path.name, output_path.name)
    return output_path


def decrypt_file(
    input_path: PathLike,
    private_key: diary_crypto.PrivateKeyLike,
    output_path: Optional[PathLike] = None,
) -> Path:
    """
    Decrypt a file produced by :func:`encrypt_file` (or the browser diary).

    The output defaults to the input name without ``.enc``. Nothing is
    written when decryption fails.
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_name(decrypted_filename(input_path.name))
    output_path = Path(output_path)

    try:
        plaintext = diary_crypto.decrypt(input_path.read_bytes(), private_key)
    except diary_crypto.DecryptionError as exc:
        logger.warning("Decryption of %s failed: %s", input_path.name, type(exc).__name__)
        raise
    output_path.write_bytes(plaintext)
    logger.info("Decrypted %s -> %s", input_path.name, output_path.name)
    return output_path
