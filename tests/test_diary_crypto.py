import base64
import struct

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

import diary_crypto
from diary_crypto import (
    AuthenticationError,
    DecryptionError,
    EncryptionError,
    Envelope,
    InvalidKeyFormatError,
    KeyGenerationError,
    KeyUnwrapError,
    MalformedEnvelopeError,
)


def _ciphertext_offset(data: bytes) -> int:
    (wk_len,) = struct.unpack_from(">H", data, 0)
    (iv_len,) = struct.unpack_from(">H", data, 2 + wk_len)
    return 4 + wk_len + iv_len


# ---------------------------------------------------------------------------
# Key pairs
# ---------------------------------------------------------------------------


def test_generate_keypair_is_rsa_2048(keypair):
    pub = keypair.load_public_key()
    priv = keypair.load_private_key()
    assert pub.key_size == 2048
    assert pub.public_numbers().e == 65537
    assert priv.public_key().public_numbers() == pub.public_numbers()


def test_generate_keypair_rejects_small_keys():
    with pytest.raises(KeyGenerationError):
        diary_crypto.generate_keypair(1024)


def test_keypair_repr_hides_material(keypair):
    text = repr(keypair)
    assert "bytes>" in text
    assert base64.b64encode(keypair.public_key).decode()[:20] not in text


def test_export_import_roundtrip(keypair):
    public_b64, private_b64 = diary_crypto.export_keypair(keypair)
    restored = diary_crypto.import_keypair(public_b64, private_b64)
    assert restored == keypair


def test_import_accepts_der_and_pem(keypair):
    pub = keypair.load_public_key()
    priv = keypair.load_private_key()
    pem_pub = pub.public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode()
    pem_priv = priv.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()

    assert diary_crypto.import_keypair(keypair.public_key, keypair.private_key) == keypair
    assert diary_crypto.import_keypair(pem_pub, pem_priv) == keypair


def test_import_tolerates_wrapped_base64(keypair):
    public_b64, private_b64 = diary_crypto.export_keypair(keypair)
    wrapped = "\n".join(public_b64[i : i + 64] for i in range(0, len(public_b64), 64))
    assert diary_crypto.import_keypair(wrapped, private_b64) == keypair


@pytest.mark.parametrize(
    "public, private",
    [
        ("not base64 at all!", None),
        ("", None),
        (base64.b64encode(b"\x30\x03garbage").decode(), None),
        (None, "!!!"),
    ],
)
def test_import_rejects_bad_material(keypair, public, private):
    public_b64, private_b64 = diary_crypto.export_keypair(keypair)
    with pytest.raises(InvalidKeyFormatError):
        diary_crypto.import_keypair(
            public if public is not None else public_b64,
            private if private is not None else private_b64,
        )


@pytest.mark.parametrize("encoding", [serialization.Encoding.DER, serialization.Encoding.PEM])
def test_import_rejects_pkcs1_encodings(keypair, encoding):
    public_b64, private_b64 = diary_crypto.export_keypair(keypair)
    pkcs1_public = keypair.load_public_key().public_bytes(
        encoding, serialization.PublicFormat.PKCS1
    )
    traditional_private = keypair.load_private_key().private_bytes(
        encoding,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )

    with pytest.raises(InvalidKeyFormatError, match="SPKI"):
        diary_crypto.import_keypair(pkcs1_public, private_b64)
    with pytest.raises(InvalidKeyFormatError, match="PKCS#8"):
        diary_crypto.import_keypair(public_b64, traditional_private)


def test_import_rejects_swapped_halves(keypair):
    public_b64, private_b64 = diary_crypto.export_keypair(keypair)
    with pytest.raises(InvalidKeyFormatError):
        diary_crypto.import_keypair(private_b64, public_b64)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def test_hello_diary_envelope(keypair):
    sealed = diary_crypto.encrypt("hello diary".encode("utf-8"), keypair)
    assert struct.unpack(">H", sealed[:2])[0] == 256
    envelope = diary_crypto.parse_envelope(sealed)
    assert len(envelope.iv) == 12
    assert len(envelope.ciphertext) == len("hello diary") + 16
    assert diary_crypto.decrypt(sealed, keypair) == b"hello diary"


@pytest.mark.parametrize(
    "plaintext",
    [b"", b"x", "Dear Diary, today was ☀️".encode("utf-8"), bytes(range(256)) * 64],
)
def test_roundtrip(keypair, plaintext):
    sealed = diary_crypto.encrypt(plaintext, keypair)
    assert diary_crypto.decrypt(sealed, keypair) == plaintext


def test_encrypt_accepts_raw_public_key(keypair):
    sealed = diary_crypto.encrypt(b"entry", keypair.public_key)
    assert diary_crypto.decrypt(sealed, keypair.private_key) == b"entry"


def test_encryption_is_not_deterministic(keypair):
    a = diary_crypto.encrypt(b"same words", keypair)
    b = diary_crypto.encrypt(b"same words", keypair)
    assert a != b
    assert diary_crypto.parse_envelope(a).iv != diary_crypto.parse_envelope(b).iv


def test_tampered_ciphertext_fails_authentication(keypair):
    sealed = diary_crypto.encrypt(b"private thoughts", keypair)
    start = _ciphertext_offset(sealed)
    # first byte, a middle byte and the last tag byte
    for index in (start, (start + len(sealed)) // 2, len(sealed) - 1):
        tampered = bytearray(sealed)
        tampered[index] ^= 0x01
        with pytest.raises(AuthenticationError):
            diary_crypto.decrypt(bytes(tampered), keypair)


def test_tampered_iv_fails_authentication(keypair):
    sealed = bytearray(diary_crypto.encrypt(b"private thoughts", keypair))
    (wk_len,) = struct.unpack_from(">H", sealed, 0)
    sealed[4 + wk_len] ^= 0x80
    with pytest.raises(AuthenticationError):
        diary_crypto.decrypt(bytes(sealed), keypair)


def test_tampered_wrapped_key_fails_unwrap(keypair):
    sealed = bytearray(diary_crypto.encrypt(b"private thoughts", keypair))
    sealed[10] ^= 0xFF
    with pytest.raises(KeyUnwrapError):
        diary_crypto.decrypt(bytes(sealed), keypair)


def test_wrong_private_key_is_rejected(keypair, other_keypair):
    sealed = diary_crypto.encrypt(b"for someone else", keypair)
    with pytest.raises(DecryptionError) as info:
        diary_crypto.decrypt(sealed, other_keypair)
    assert isinstance(info.value, (KeyUnwrapError, AuthenticationError))


def test_unwrap_failure_hides_cause(keypair, other_keypair):
    sealed = diary_crypto.encrypt(b"x", keypair)
    with pytest.raises(KeyUnwrapError) as info:
        diary_crypto.decrypt(sealed, other_keypair)
    assert info.value.__cause__ is None
    assert info.value.__suppress_context__


# 2048-bit pair: wrapped key is bytes 2-257, IV length 258-259, IV 260-271
@pytest.mark.parametrize("cut", [0, 1, 2, 100, 257, 259, 260, 265, 271])
def test_truncated_envelope_is_malformed(keypair, cut):
    sealed = diary_crypto.encrypt(b"cut short", keypair)
    with pytest.raises(MalformedEnvelopeError):
        diary_crypto.decrypt(sealed[:cut], keypair)


def test_declared_length_beyond_data_is_malformed(keypair):
    data = struct.pack(">H", 300) + b"\x00" * 10
    with pytest.raises(MalformedEnvelopeError):
        diary_crypto.decrypt(data, keypair)


def test_declared_iv_length_beyond_data_is_malformed():
    data = struct.pack(">H", 3) + b"KEY" + struct.pack(">H", 12) + b"\x00" * 11
    with pytest.raises(MalformedEnvelopeError, match="IV"):
        diary_crypto.parse_envelope(data)


def test_empty_ciphertext_region_fails_authentication(keypair):
    sealed = diary_crypto.encrypt(b"gone", keypair)
    stripped = sealed[: _ciphertext_offset(sealed)]
    with pytest.raises(AuthenticationError):
        diary_crypto.decrypt(stripped, keypair)


def test_unusable_iv_is_malformed(keypair):
    sealed = diary_crypto.encrypt(b"gone", keypair)
    env = diary_crypto.parse_envelope(sealed)
    bad = Envelope(wrapped_key=env.wrapped_key, iv=b"", ciphertext=env.ciphertext)
    with pytest.raises(MalformedEnvelopeError):
        diary_crypto.decrypt(bad.to_bytes(), keypair)


def test_envelope_rejects_oversized_fields():
    env = Envelope(wrapped_key=b"\x00" * 0x10000, iv=b"\x00" * 12, ciphertext=b"")
    with pytest.raises(EncryptionError):
        env.to_bytes()


def test_envelope_layout():
    env = Envelope(wrapped_key=b"KEY", iv=b"IVIVIV", ciphertext=b"CT")
    data = env.to_bytes()
    assert data == b"\x00\x03KEY\x00\x06IVIVIVCT"
    assert Envelope.from_bytes(data) == env


def test_decryption_errors_share_base():
    for exc in (MalformedEnvelopeError, KeyUnwrapError, AuthenticationError):
        assert issubclass(exc, DecryptionError)
        assert issubclass(exc, diary_crypto.DiaryCryptoError)


# ---------------------------------------------------------------------------
# Fixed envelopes
# ---------------------------------------------------------------------------

# Published AES-256-GCM vectors (all-zero key and 96-bit nonce, no AAD).
_GCM_ZERO_KEY = bytes(32)
_GCM_ZERO_IV = bytes(12)


@pytest.mark.parametrize(
    "plaintext, ciphertext_and_tag",
    [
        (b"", "530f8afbc74536b9a963b4f1c4cb738b"),
        (
            bytes(16),
            "cea7403d4d606b6e074ec5d3baf39d18" "d0d1c8a799996bf0265b98b5d48ab919",
        ),
    ],
)
def test_decrypts_web_crypto_layout(keypair, plaintext, ciphertext_and_tag):
    # wrap exactly as crypto.subtle.encrypt({name: "RSA-OAEP"}) with SHA-256 keys
    wrapped = keypair.load_public_key().encrypt(
        _GCM_ZERO_KEY,
        padding.OAEP(mgf=padding.MGF1(hashes.SHA256()), algorithm=hashes.SHA256(), label=None),
    )
    data = (
        struct.pack(">H", len(wrapped))
        + wrapped
        + struct.pack(">H", len(_GCM_ZERO_IV))
        + _GCM_ZERO_IV
        + bytes.fromhex(ciphertext_and_tag)
    )
    assert diary_crypto.decrypt(data, keypair) == plaintext
