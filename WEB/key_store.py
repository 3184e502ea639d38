"""
Secure Diary Web — Session-State Key Store
===========================================

Keep the active RSA key pair entirely in ``st.session_state`` — nothing is
persisted to disk or sent anywhere beyond the active browser session.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import streamlit as st

# -- make project root importable so we can ``import diary_keys`` ----------
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from diary_crypto import KeyPair  # noqa: E402
from diary_keys import DiarySession, KeyStore  # noqa: E402


_PAIR_KEY = "secure_diary_keypair"
_SESSION_KEY = "secure_diary_session"


class SessionKeyStore(KeyStore):
    """A :class:`KeyStore` backed by the Streamlit session."""

    def load(self) -> Optional[KeyPair]:
        return st.session_state.get(_PAIR_KEY)

    def save(self, pair: KeyPair) -> None:
        st.session_state[_PAIR_KEY] = pair

    def clear(self) -> None:
        st.session_state.pop(_PAIR_KEY, None)


def get_session() -> DiarySession:
    """Return this browser session's :class:`DiarySession`, creating it once."""
    if _SESSION_KEY not in st.session_state:
        session = DiarySession(SessionKeyStore())
        session.restore()
        st.session_state[_SESSION_KEY] = session
    return st.session_state[_SESSION_KEY]
