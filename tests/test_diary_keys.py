import json
import os
import platform

import pytest

import diary_crypto
import diary_keys
from diary_crypto import InvalidKeyFormatError
from diary_keys import (
    DiarySession,
    FileKeyStore,
    KeyStoreError,
    MemoryKeyStore,
)


# ---------------------------------------------------------------------------
# Key files
# ---------------------------------------------------------------------------


def test_key_file_layout(keypair):
    doc = json.loads(diary_keys.dump_key_file(keypair))
    assert set(doc) == {"publicKey", "privateKey"}
    assert (doc["publicKey"], doc["privateKey"]) == diary_crypto.export_keypair(keypair)


def test_key_file_roundtrip(keypair):
    text = diary_keys.dump_key_file(keypair)
    assert diary_keys.load_key_file(text) == keypair
    assert diary_keys.load_key_file(text.encode("utf-8")) == keypair


@pytest.mark.parametrize(
    "data",
    [
        "",
        "{not json",
        "[1, 2]",
        '{"publicKey": "abc"}',
        '{"publicKey": 1, "privateKey": 2}',
        b"\xff\xfe\x00",
    ],
)
def test_load_key_file_rejects_invalid(data):
    with pytest.raises(InvalidKeyFormatError):
        diary_keys.load_key_file(data)


def test_fingerprint_is_stable(keypair, other_keypair):
    fp = diary_keys.key_fingerprint(keypair.public_key)
    assert fp == diary_keys.key_fingerprint(keypair.public_key)
    assert fp != diary_keys.key_fingerprint(other_keypair.public_key)
    assert len(fp.split(":")) == 4


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


def test_memory_store():
    store = MemoryKeyStore()
    assert store.load() is None


def test_file_store_roundtrip(tmp_path, keypair):
    store = FileKeyStore(tmp_path / "nested" / "keys.json")
    assert store.load() is None

    store.save(keypair)
    assert store.path.exists()
    assert FileKeyStore(store.path).load() == keypair

    store.clear()
    assert not store.path.exists()
    store.clear()


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_file_store_is_owner_only(tmp_path, keypair):
    store = FileKeyStore(tmp_path / "keys.json")
    store.save(keypair)
    assert os.stat(store.path).st_mode & 0o777 == 0o600


def test_file_store_corrupt_file(tmp_path):
    path = tmp_path / "keys.json"
    path.write_text('{"publicKey": "only half"}', "utf-8")
    with pytest.raises(KeyStoreError):
        FileKeyStore(path).load()


def test_failed_save_leaves_no_key_material(tmp_path, monkeypatch, keypair):
    def refuse(src, dst):
        raise PermissionError("read-only directory")

    monkeypatch.setattr(diary_keys.os, "replace", refuse)
    store = FileKeyStore(tmp_path / "keys.json")
    with pytest.raises(KeyStoreError):
        store.save(keypair)
    assert list(tmp_path.iterdir()) == []


def test_clear_removes_stale_temp_file(tmp_path, keypair):
    store = FileKeyStore(tmp_path / "keys.json")
    store.save(keypair)
    stale = tmp_path / "keys.json.tmp"
    stale.write_text(diary_keys.dump_key_file(keypair), "utf-8")

    store.clear()
    assert list(tmp_path.iterdir()) == []


def test_file_store_default_path(tmp_path, monkeypatch):
    monkeypatch.setenv("SECURE_DIARY_HOME", str(tmp_path))
    assert FileKeyStore().path == tmp_path / "keys.json"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def test_session_without_keys():
    session = DiarySession()
    assert not session.has_keys
    assert session.restore() is False
    with pytest.raises(InvalidKeyFormatError, match="No keys loaded"):
        session.keypair


def test_session_restore_from_store(keypair):
    session = DiarySession(MemoryKeyStore(keypair))
    assert session.restore() is True
    assert session.keypair == keypair


def test_session_import_and_encrypt(keypair):
    store = MemoryKeyStore()
    session = DiarySession(store)
    session.import_keys(*diary_crypto.export_keypair(keypair))

    assert store.load() == keypair
    sealed = session.encrypt(b"today")
    assert session.decrypt(sealed) == b"today"


def test_session_failed_import_keeps_current_pair(keypair, other_keypair):
    store = MemoryKeyStore()
    session = DiarySession(store)
    session.activate(keypair)

    public_b64, _ = diary_crypto.export_keypair(other_keypair)
    with pytest.raises(InvalidKeyFormatError):
        session.import_keys(public_b64, "corrupted")
    with pytest.raises(InvalidKeyFormatError):
        session.import_key_file('{"publicKey": "x"}')

    assert session.keypair == keypair
    assert store.load() == keypair


def test_session_key_file_export_import(keypair):
    source = DiarySession(MemoryKeyStore(keypair))
    source.restore()
    exported = source.export_key_file()

    target = DiarySession()
    target.import_key_file(exported)
    assert target.keypair == keypair


def test_session_logout(tmp_path, keypair):
    store = FileKeyStore(tmp_path / "keys.json")
    session = DiarySession(store)
    session.activate(keypair)
    assert store.path.exists()

    session.logout()
    assert not session.has_keys
    assert not store.path.exists()
    assert DiarySession(store).restore() is False


def test_session_generate_persists():
    store = MemoryKeyStore()
    session = DiarySession(store)
    pair = session.generate()
    assert store.load() == pair
    assert session.keypair == pair
