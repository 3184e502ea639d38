"""
Secure Diary Encryption Engine
===============================

Hybrid RSA-OAEP + AES-256-GCM envelope encryption:
- RSA-2048 key pairs (SPKI public / PKCS#8 private, DER encoded)
- A fresh AES-256 key and 96-bit nonce for every message
- The AES key wrapped under the recipient's public key with RSA-OAEP (SHA-256)
- Binary envelope format interoperable with the Web Crypto API diary

Uses the ``cryptography`` library exclusively.

Envelope format
---------------
::

    offset      size      field
    0           2         wrapped key length (big-endian uint16)
    2           wkl       RSA-OAEP wrapped AES key
    2+wkl       2         IV length (big-endian uint16)
    4+wkl       ivl       AES-GCM nonce
    4+wkl+ivl   rest      AES-256-GCM ciphertext + 16-byte tag

There is no magic, version or algorithm identifier: envelopes written by the
browser edition must keep decrypting byte-for-byte.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import struct
from dataclasses import dataclass
from typing import Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RSA_KEY_SIZE: int = 2048
RSA_PUBLIC_EXPONENT: int = 65537
KEY_SIZE: int = 32      # AES-256 = 32 bytes
NONCE_SIZE: int = 12    # AES-GCM recommended nonce
TAG_SIZE: int = 16      # GCM authentication tag
LENGTH_PREFIX: int = 2  # uint16 big-endian length fields
MAX_FIELD_LENGTH: int = 0xFFFF

_LENGTH = struct.Struct(">H")

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DiaryCryptoError(Exception):
    """Base exception for all Secure Diary errors."""


class KeyGenerationError(DiaryCryptoError):
    """The RSA key pair could not be generated."""


class InvalidKeyFormatError(DiaryCryptoError):
    """Key material could not be parsed as the expected RSA key."""


class EncryptionError(DiaryCryptoError):
    """A primitive failed while building an envelope."""


class DecryptionError(DiaryCryptoError):
    """An envelope could not be opened."""


class MalformedEnvelopeError(DecryptionError):
    """The envelope is shorter than its length fields declare."""


class KeyUnwrapError(DecryptionError):
    """The wrapped AES key could not be recovered with this private key."""


class AuthenticationError(DecryptionError):
    """GCM tag verification failed."""


# ---------------------------------------------------------------------------
# Padding
# ---------------------------------------------------------------------------


def _oaep() -> asym_padding.OAEP:
    """RSA-OAEP with SHA-256 for both the main hash and MGF1 (Web Crypto default)."""
    return asym_padding.OAEP(
        mgf=asym_padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyPair:
    """A matched RSA key pair as DER bytes (SPKI public, PKCS#8 private)."""

    public_key: bytes
    private_key: bytes

    def load_public_key(self) -> RSAPublicKey:
        return KeyPairManager.load_public_key(self.public_key)

    def load_private_key(self) -> RSAPrivateKey:
        return KeyPairManager.load_private_key(self.private_key)

    def __repr__(self) -> str:
        # never print key material
        return (
            f"KeyPair(public_key=<{len(self.public_key)} bytes>, "
            f"private_key=<{len(self.private_key)} bytes>)"
        )


@dataclass(frozen=True)
class Envelope:
    """The parsed fields of a serialized envelope."""

    wrapped_key: bytes
    iv: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        """Serialize to the wire format."""
        try:
            return b"".join(
                (
                    _LENGTH.pack(len(self.wrapped_key)),
                    self.wrapped_key,
                    _LENGTH.pack(len(self.iv)),
                    self.iv,
                    self.ciphertext,
                )
            )
        except struct.error as exc:
            raise EncryptionError(
                f"Envelope field longer than {MAX_FIELD_LENGTH} bytes."
            ) from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        """
        Parse the wire format.

        Raises
        ------
        MalformedEnvelopeError
            If the data ends before a declared field is complete.
        """
        data = bytes(data)
        offset = 0
        wrapped_key, offset = _read_field(data, offset, "wrapped key")
        iv, offset = _read_field(data, offset, "IV")
        return cls(wrapped_key=wrapped_key, iv=iv, ciphertext=data[offset:])


def _read_field(data: bytes, offset: int, name: str) -> Tuple[bytes, int]:
    """Read one length-prefixed field starting at *offset*."""
    if len(data) < offset + LENGTH_PREFIX:
        raise MalformedEnvelopeError(f"Envelope truncated before {name} length.")
    (length,) = _LENGTH.unpack_from(data, offset)
    offset += LENGTH_PREFIX
    end = offset + length
    if len(data) < end:
        raise MalformedEnvelopeError(
            f"Envelope truncated inside {name} "
            f"(declared {length} bytes, {len(data) - offset} available)."
        )
    return data[offset:end], end


# ---------------------------------------------------------------------------
# KeyPairManager
# ---------------------------------------------------------------------------


KeyMaterial = Union[bytes, bytearray, str]


class KeyPairManager:
    """
    Create, import and export RSA key pairs.

    All public methods are **static**: the class is a namespace and knows
    nothing about envelopes or symmetric keys.
    """

    @staticmethod
    def generate_keypair(key_size: int = RSA_KEY_SIZE) -> KeyPair:
        """Generate a fresh RSA-OAEP key pair (default 2048-bit, e = 65537)."""
        if key_size < RSA_KEY_SIZE:
            raise KeyGenerationError(
                f"RSA key size must be at least {RSA_KEY_SIZE} bits."
            )
        try:
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=key_size,
            )
            pair = KeyPair(
                public_key=private_key.public_key().public_bytes(
                    encoding=serialization.Encoding.DER,
                    format=serialization.PublicFormat.SubjectPublicKeyInfo,
                ),
                private_key=private_key.private_bytes(
                    encoding=serialization.Encoding.DER,
                    format=serialization.PrivateFormat.PKCS8,
                    encryption_algorithm=serialization.NoEncryption(),
                ),
            )
        except Exception as exc:
            raise KeyGenerationError(f"RSA key generation failed: {exc}") from exc
        logger.info("Generated %d-bit RSA key pair", key_size)
        return pair

    @staticmethod
    def import_keypair(public_key: KeyMaterial, private_key: KeyMaterial) -> KeyPair:
        """
        Build a :class:`KeyPair` from externally sourced key material.

        Each half may be raw DER, base64 text or PEM, and must be SPKI (public)
        or PKCS#8 (private); PKCS#1 encodings are refused. Both halves are parsed
        before the pair is returned; whether they belong together is not
        checked (a mismatch surfaces as :class:`KeyUnwrapError` later).

        Raises
        ------
        InvalidKeyFormatError
            If either half is not an RSA key of the expected kind.
        """
        pub = KeyPairManager.load_public_key(public_key)
        priv = KeyPairManager.load_private_key(private_key)
        pair = KeyPair(
            public_key=pub.public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            ),
            private_key=priv.private_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            ),
        )
        logger.info("Imported %d-bit RSA key pair", pub.key_size)
        return pair

    @staticmethod
    def export_keypair(pair: KeyPair) -> Tuple[str, str]:
        """Return ``(public_b64, private_b64)`` for file export."""
        return (
            base64.b64encode(pair.public_key).decode("ascii"),
            base64.b64encode(pair.private_key).decode("ascii"),
        )

    # ------------------------------------------------------------------
    # Key object loading
    # ------------------------------------------------------------------

    @staticmethod
    def load_public_key(material: KeyMaterial) -> RSAPublicKey:
        """Load an RSA public key from SPKI DER, base64 or PEM."""
        if isinstance(material, RSAPublicKey):
            return material
        data = _key_bytes(material, "public")
        try:
            if data.startswith(b"-----BEGIN"):
                _require_pem_label(data, b"PUBLIC KEY")
                key = serialization.load_pem_public_key(data)
            else:
                _require_der_layout(data, _SPKI_LAYOUT)
                key = serialization.load_der_public_key(data)
        except Exception as exc:
            raise InvalidKeyFormatError("Public key is not valid SPKI data.") from exc
        if not isinstance(key, RSAPublicKey):
            raise InvalidKeyFormatError("Public key is not an RSA key.")
        return key

    @staticmethod
    def load_private_key(material: KeyMaterial) -> RSAPrivateKey:
        """Load an unencrypted RSA private key from PKCS#8 DER, base64 or PEM."""
        if isinstance(material, RSAPrivateKey):
            return material
        data = _key_bytes(material, "private")
        try:
            if data.startswith(b"-----BEGIN"):
                _require_pem_label(data, b"PRIVATE KEY")
                key = serialization.load_pem_private_key(data, password=None)
            else:
                _require_der_layout(data, _PKCS8_LAYOUT)
                key = serialization.load_der_private_key(data, password=None)
        except Exception as exc:
            raise InvalidKeyFormatError("Private key is not valid PKCS#8 data.") from exc
        if not isinstance(key, RSAPrivateKey):
            raise InvalidKeyFormatError("Private key is not an RSA key.")
        return key


def _key_bytes(material: KeyMaterial, kind: str) -> bytes:
    """
    Normalise key input to DER or PEM bytes.

    Text that is not PEM is treated as base64 (how the diary persists keys).
    Binary input starting with an ASN.1 SEQUENCE tag is taken as DER.
    """
    if isinstance(material, str):
        raw = material.strip().encode("ascii", errors="replace")
    elif isinstance(material, (bytes, bytearray)):
        raw = bytes(material)
    else:
        raise InvalidKeyFormatError(
            f"Unsupported key type {type(material).__name__}."
        )

    if not raw:
        raise InvalidKeyFormatError("Key material is empty.")
    if raw.lstrip().startswith(b"-----BEGIN"):
        return raw.strip()
    if raw[0] == 0x30 and isinstance(material, (bytes, bytearray)):
        return raw
    try:
        return base64.b64decode(b"".join(raw.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyFormatError(
            f"The {kind} key is neither DER, PEM nor base64."
        ) from exc


# DER tags of the top-level fields; PKCS#1 / OpenSSL "traditional" keys start
# with INTEGERs instead and are rejected.
_SPKI_LAYOUT = (0x30, 0x03)          # AlgorithmIdentifier, BIT STRING
_PKCS8_LAYOUT = (0x02, 0x30, 0x04)   # version, AlgorithmIdentifier, OCTET STRING


def _der_element(data: bytes, offset: int) -> Tuple[int, int, int]:
    """Return ``(tag, content_start, content_end)`` of the element at *offset*."""
    if len(data) < offset + 2:
        raise ValueError("DER element truncated.")
    tag, first = data[offset], data[offset + 1]
    start = offset + 2
    if first < 0x80:
        length = first
    else:
        n = first & 0x7F
        if not 0 < n <= 4 or len(data) < start + n:
            raise ValueError("Bad DER length.")
        length = int.from_bytes(data[start : start + n], "big")
        start += n
    if len(data) < start + length:
        raise ValueError("DER element truncated.")
    return tag, start, start + length


def _require_der_layout(data: bytes, layout: Tuple[int, ...]) -> None:
    tag, offset, end = _der_element(data, 0)
    if tag != 0x30:
        raise ValueError("Key is not a DER SEQUENCE.")
    tags = []
    while offset < end and len(tags) < len(layout):
        tag, _, offset = _der_element(data, offset)
        tags.append(tag)
    if tuple(tags) != layout:
        raise ValueError("Unexpected key structure.")


def _require_pem_label(data: bytes, label: bytes) -> None:
    if not data.startswith(b"-----BEGIN " + label + b"-----"):
        raise ValueError(f"Expected a '{label.decode()}' PEM block.")


# ---------------------------------------------------------------------------
# EnvelopeCipher
# ---------------------------------------------------------------------------


PublicKeyLike = Union[KeyPair, RSAPublicKey, bytes, bytearray, str]
PrivateKeyLike = Union[KeyPair, RSAPrivateKey, bytes, bytearray, str]


class EnvelopeCipher:
    """
    Hybrid encrypt / decrypt of whole payloads.

    Stateless: every call draws its own AES key and nonce.
    """

    @staticmethod
    def encrypt(plaintext: bytes, public_key: PublicKeyLike) -> bytes:
        """
        Encrypt *plaintext* for the holder of *public_key*.

        Returns the serialized envelope.
        """
        pub = _coerce_public_key(public_key)
        try:
            aes_key = os.urandom(KEY_SIZE)
            iv = os.urandom(NONCE_SIZE)
            ciphertext = AESGCM(aes_key).encrypt(iv, bytes(plaintext), None)
            wrapped_key = pub.encrypt(aes_key, _oaep())
        except Exception as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc

        envelope = Envelope(wrapped_key=wrapped_key, iv=iv, ciphertext=ciphertext)
        data = envelope.to_bytes()
        logger.debug(
            "Sealed %d plaintext bytes into %d-byte envelope",
            len(plaintext),
            len(data),
        )
        return data

    @staticmethod
    def decrypt(data: bytes, private_key: PrivateKeyLike) -> bytes:
        """
        Decrypt an envelope produced by :meth:`encrypt`.

        Raises
        ------
        MalformedEnvelopeError
            If the envelope is truncated or its IV is unusable.
        KeyUnwrapError
            If the AES key cannot be unwrapped (usually the wrong private key).
        AuthenticationError
            If the GCM tag does not verify (tampered or corrupted data).
        """
        envelope = Envelope.from_bytes(data)
        priv = _coerce_private_key(private_key)

        try:
            aes_key = priv.decrypt(envelope.wrapped_key, _oaep())
        except Exception:
            # one message for every failure mode, no chained cause
            raise KeyUnwrapError(
                "Could not unwrap the message key: wrong private key or corrupted data."
            ) from None
        if len(aes_key) != KEY_SIZE:
            raise KeyUnwrapError(
                "Could not unwrap the message key: wrong private key or corrupted data."
            )

        try:
            aesgcm = AESGCM(aes_key)
            plaintext = aesgcm.decrypt(envelope.iv, envelope.ciphertext, None)
        except InvalidTag:
            raise AuthenticationError(
                "Authentication failed: wrong key or corrupted data."
            ) from None
        except ValueError as exc:
            raise MalformedEnvelopeError(
                f"Unusable IV of {len(envelope.iv)} bytes."
            ) from exc
        logger.debug("Opened %d-byte envelope", len(data))
        return plaintext

    @staticmethod
    def parse_envelope(data: bytes) -> Envelope:
        """Split an envelope into its fields without decrypting it."""
        return Envelope.from_bytes(data)


def _coerce_public_key(key: PublicKeyLike) -> RSAPublicKey:
    if isinstance(key, KeyPair):
        return key.load_public_key()
    return KeyPairManager.load_public_key(key)


def _coerce_private_key(key: PrivateKeyLike) -> RSAPrivateKey:
    if isinstance(key, KeyPair):
        return key.load_private_key()
    return KeyPairManager.load_private_key(key)


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------

generate_keypair = KeyPairManager.generate_keypair
import_keypair = KeyPairManager.import_keypair
export_keypair = KeyPairManager.export_keypair
load_public_key = KeyPairManager.load_public_key
load_private_key = KeyPairManager.load_private_key

encrypt = EnvelopeCipher.encrypt
decrypt = EnvelopeCipher.decrypt
parse_envelope = EnvelopeCipher.parse_envelope


if __name__ == "__main__":
    pair = generate_keypair()
    sealed = encrypt("hello diary".encode("utf-8"), pair)
    print(f"wrapped key length: {_LENGTH.unpack_from(sealed)[0]}")
    print(f"envelope: {len(sealed)} bytes")
    print(f"decrypted: {decrypt(sealed, pair).decode('utf-8')}")
