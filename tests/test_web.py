import sys
from pathlib import Path

import pytest

st = pytest.importorskip("streamlit")

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "WEB"))

import diary_crypto  # noqa: E402
import key_store  # noqa: E402


def test_session_key_store(monkeypatch, keypair):
    state = {}
    monkeypatch.setattr(st, "session_state", state)

    session = key_store.get_session()
    assert not session.has_keys
    assert key_store.get_session() is session

    session.activate(keypair)
    assert state["secure_diary_keypair"] == keypair

    # a new script run restores from session state
    del state["secure_diary_session"]
    assert key_store.get_session().keypair == keypair

    key_store.get_session().logout()
    assert "secure_diary_keypair" not in state


def test_saved_entry_clears_editor_and_expires(monkeypatch, keypair):
    from tabs import text_tab

    state = {}
    monkeypatch.setattr(st, "session_state", state)
    key_store.get_session().activate(keypair)

    state["entry_text"] = "Dear Diary, today was quiet."
    text_tab._save_entry()
    filename, envelope = state["entry_last"]
    assert filename.startswith("diary-entry-") and filename.endswith(".txt.enc")
    assert diary_crypto.decrypt(envelope, keypair) == b"Dear Diary, today was quiet."
    assert state["entry_text"] == ""

    # typing the next entry withdraws the old download
    state["entry_text"] = "Another day"
    text_tab._forget_last()
    assert "entry_last" not in state


def test_empty_entry_is_refused(monkeypatch, keypair):
    from tabs import text_tab

    state = {"entry_text": "", "entry_last": ("old.txt.enc", b"old")}
    monkeypatch.setattr(st, "session_state", state)
    key_store.get_session().activate(keypair)

    text_tab._save_entry()
    assert "entry_last" not in state
    assert state["entry_error"] == "Please write something first."
