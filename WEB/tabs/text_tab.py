"""
Secure Diary Web: Text Entry
============================

Write a diary entry and download it encrypted as
``diary-entry-<timestamp>.txt.enc``. A saved entry clears the editor, and
the download stays on offer only until the editor is touched again.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import diary_crypto  # noqa: E402
import diary_files  # noqa: E402

from key_store import get_session  # noqa: E402

_TEXT = "entry_text"
_LAST = "entry_last"
_ERROR = "entry_error"


def _forget_last() -> None:
    st.session_state.pop(_LAST, None)
    st.session_state.pop(_ERROR, None)


def _save_entry() -> None:
    """Encrypt the editor contents, keep the result for download and clear the editor."""
    _forget_last()
    entry = st.session_state.get(_TEXT, "")
    if not entry:
        st.session_state[_ERROR] = "Please write something first."
        return
    try:
        filename, envelope = diary_files.encrypt_entry(entry, get_session().keypair)
    except diary_crypto.DiaryCryptoError as e:
        st.session_state[_ERROR] = f"Error encrypting content: {e}"
        return
    st.session_state[_LAST] = (filename, envelope)
    st.session_state[_TEXT] = ""


def render() -> None:
    """Render the Text Entry tab."""
    entry = st.text_area(
        "Text Entry",
        height=260,
        placeholder="Dear Diary...",
        key=_TEXT,
        on_change=_forget_last,
    )

    if entry:
        n_chars = len(entry)
        n_bytes = len(entry.encode("utf-8"))
        st.caption(f"{n_chars:,} chars  |  {n_bytes:,} bytes")

    st.button(
        "🔒 Save Entry",
        type="primary",
        use_container_width=True,
        key="entry_save",
        on_click=_save_entry,
    )

    error = st.session_state.get(_ERROR)
    if error:
        st.error(error)

    last = st.session_state.get(_LAST)
    if last:
        filename, envelope = last
        st.success(f"Saved as: {filename}")
        st.download_button(
            "📥 Download encrypted entry",
            data=envelope,
            file_name=filename,
            mime="application/octet-stream",
            key="entry_download",
        )
