"""
Secure Diary Key Store
=======================

Everything around the active RSA key pair that is not cryptography:

  1. Key stores — where the pair lives between sessions
     (in memory, or a JSON file with owner-only permissions)
  2. Key files — the ``diary-keys.json`` export / import format
  3. DiarySession — the caller-owned "active key pair"

The JSON layout matches what the browser diary kept in ``localStorage``::

    {"publicKey": "<base64 SPKI>", "privateKey": "<base64 PKCS#8>"}
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import platform
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import diary_crypto
from diary_config import keys_path
from diary_crypto import DiaryCryptoError, InvalidKeyFormatError, KeyPair

logger = logging.getLogger(__name__)

KEY_FILE_NAME = "diary-keys.json"

_PUBLIC_FIELD = "publicKey"
_PRIVATE_FIELD = "privateKey"


class KeyStoreError(DiaryCryptoError):
    """The persisted key pair could not be read or written."""


# ---------------------------------------------------------------------------
# Key files
# ---------------------------------------------------------------------------

def dump_key_file(pair: KeyPair) -> str:
    """Serialize *pair* as the exported ``diary-keys.json`` document."""
    public_b64, private_b64 = diary_crypto.export_keypair(pair)
    return json.dumps({_PUBLIC_FIELD: public_b64, _PRIVATE_FIELD: private_b64}, indent=2)


def load_key_file(data: Union[str, bytes]) -> KeyPair:
    """
    Parse an exported key file.

    Raises
    ------
    InvalidKeyFormatError
        If the document is not JSON, lacks either field, or holds bad keys.
    """
    try:
        doc = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidKeyFormatError("Key file is not valid JSON.") from exc
    if not isinstance(doc, dict):
        raise InvalidKeyFormatError("Key file must be a JSON object.")
    public_b64 = doc.get(_PUBLIC_FIELD)
    private_b64 = doc.get(_PRIVATE_FIELD)
    if not isinstance(public_b64, str) or not isinstance(private_b64, str):
        raise InvalidKeyFormatError(
            f"Key file must contain '{_PUBLIC_FIELD}' and '{_PRIVATE_FIELD}' strings."
        )
    return diary_crypto.import_keypair(public_b64, private_b64)


def key_fingerprint(public_key: bytes, groups: int = 4) -> str:
    """
    Short SHA-256 fingerprint of an SPKI public key, e.g. ``'3f2a:9c01:…'``.

    Lets a user check at a glance which key pair is loaded.
    """
    digest = hashlib.sha256(public_key).hexdigest()
    return ":".join(digest[i * 4 : (i + 1) * 4] for i in range(groups))


# ---------------------------------------------------------------------------
# Key stores
# ---------------------------------------------------------------------------

class KeyStore(ABC):
    """Persistence for a single key pair."""

    @abstractmethod
    def load(self) -> Optional[KeyPair]:
        """Return the stored pair, or None when nothing is stored."""

    @abstractmethod
    def save(self, pair: KeyPair) -> None:
        """Replace the stored pair."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored pair."""


class MemoryKeyStore(KeyStore):
    """Keeps the pair for the lifetime of the object."""

    def __init__(self, pair: Optional[KeyPair] = None):
        self._pair = pair

    def load(self) -> Optional[KeyPair]:
        return self._pair

    def save(self, pair: KeyPair) -> None:
        self._pair = pair

    def clear(self) -> None:
        self._pair = None


class FileKeyStore(KeyStore):
    """
    Keeps the pair in a JSON file (``keys.json`` in the config directory).

    The file uses the key-file layout, so it can also be imported directly.
    Writes go through a ``.tmp`` sibling that never outlives a failed save.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            path = keys_path()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def _tmp_path(self) -> Path:
        return self._path.with_suffix(self._path.suffix + ".tmp")

    def load(self) -> Optional[KeyPair]:
        if not self._path.exists():
            return None
        try:
            text = self._path.read_text("utf-8")
        except OSError as exc:
            raise KeyStoreError(f"Cannot read key store {self._path}: {exc}") from exc
        try:
            pair = load_key_file(text)
        except InvalidKeyFormatError as exc:
            raise KeyStoreError(f"Key store {self._path} is corrupt: {exc}") from exc
        logger.info("Loaded key pair from %s", self._path)
        return pair

    def save(self, pair: KeyPair) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._tmp_path
        try:
            # owner-only from creation, before any key material is written
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dump_key_file(pair))
            if platform.system() != "Windows":
                os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except OSError as exc:
            self._discard(tmp)
            raise KeyStoreError(f"Cannot write key store {self._path}: {exc}") from exc
        logger.info("Saved key pair to %s", self._path)

    def clear(self) -> None:
        self._discard(self._tmp_path)
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise KeyStoreError(f"Cannot remove key store {self._path}: {exc}") from exc
        logger.info("Removed key store %s", self._path)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class DiarySession:
    """
    The active key pair for one user session.

    Replacing the pair is all-or-nothing: imports are fully parsed before the
    current pair or the store are touched.
    """

    def __init__(self, store: Optional[KeyStore] = None):
        self._store = store if store is not None else MemoryKeyStore()
        self._pair: Optional[KeyPair] = None

    @property
    def has_keys(self) -> bool:
        return self._pair is not None

    @property
    def keypair(self) -> KeyPair:
        if self._pair is None:
            raise InvalidKeyFormatError("No keys loaded. Generate or import a key pair first.")
        return self._pair

    def restore(self) -> bool:
        """Load the pair kept by the store. Returns True if one was found."""
        self._pair = self._store.load()
        return self._pair is not None

    def generate(self) -> KeyPair:
        pair = diary_crypto.generate_keypair()
        self.activate(pair)
        return pair

    def import_keys(
        self,
        public_key: diary_crypto.KeyMaterial,
        private_key: diary_crypto.KeyMaterial,
    ) -> KeyPair:
        pair = diary_crypto.import_keypair(public_key, private_key)
        self.activate(pair)
        return pair

    def import_key_file(self, data: Union[str, bytes]) -> KeyPair:
        pair = load_key_file(data)
        self.activate(pair)
        return pair

    def export_key_file(self) -> str:
        return dump_key_file(self.keypair)

    def logout(self) -> None:
        """Forget the active pair and clear the store."""
        self._store.clear()
        self._pair = None
        logger.info("Session keys cleared")

    def encrypt(self, plaintext: bytes) -> bytes:
        return diary_crypto.encrypt(plaintext, self.keypair)

    def decrypt(self, envelope: bytes) -> bytes:
        return diary_crypto.decrypt(envelope, self.keypair)

    def activate(self, pair: KeyPair) -> None:
        """Make *pair* the active pair and persist it."""
        self._store.save(pair)
        self._pair = pair
