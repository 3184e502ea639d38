"""
Secure Diary Web Edition.

Run from the repository root with ``streamlit run WEB/app.py``. Until a key
pair is loaded only the welcome screen is shown.
"""

from __future__ import annotations

import sys
from pathlib import Path

_here = Path(__file__).resolve().parent
for _path in (str(_here.parent), str(_here)):
    if _path not in sys.path:
        sys.path.insert(0, _path)

import streamlit as st  # noqa: E402

from diary_config import APP_NAME, APP_VERSION, configure_logging  # noqa: E402
from key_store import get_session  # noqa: E402
from tabs import file_tab, key_tab, text_tab  # noqa: E402

_ACCENT = "#e94560"

_CSS = f"""
<style>
.stButton > button[kind="primary"] {{ background-color: {_ACCENT}; border-color: {_ACCENT}; }}
.stButton > button[kind="primary"]:hover {{ background-color: #d63a54; border-color: #d63a54; }}
.stTabs [data-baseweb="tab-panel"] {{ padding-top: 1rem; }}
.diary-header {{ text-align: center; padding: 1rem 0 0.5rem 0; }}
.diary-header h1 {{ font-size: 2.2rem; margin-bottom: 0.2rem; }}
.diary-header p, .diary-welcome {{ color: #a0a0b8; font-size: 0.95rem; text-align: center; }}
.diary-or {{ text-align: center; color: #6c6c80; padding: 0.5rem 0; }}
</style>
"""

_SECURITY_NOTES = (
    "Keys exist **only** in your browser session.",
    "Closing the tab destroys your keys, so export them first.",
    "`.enc` files are compatible with the **Desktop** edition.",
    "Without the private key nothing can be decrypted.",
)


def _render_chrome() -> None:
    st.markdown(_CSS, unsafe_allow_html=True)
    st.markdown(
        f'<div class="diary-header"><h1>📝 {APP_NAME}</h1>'
        "<p>RSA-OAEP + AES-256-GCM encrypted diary</p></div>",
        unsafe_allow_html=True,
    )

    with st.sidebar:
        st.markdown("### About")
        st.markdown(
            f"**{APP_NAME}** encrypts diary entries and files with a fresh "
            "AES-256-GCM key per item, wrapped under your RSA-2048 public key."
        )
        st.markdown("#### Security Notice")
        st.markdown("  \n".join(f"• {note}" for note in _SECURITY_NOTES))
        st.caption(f"{APP_NAME} v{APP_VERSION}, web edition")


def main() -> None:
    configure_logging()
    st.set_page_config(
        page_title=APP_NAME,
        page_icon="📝",
        layout="wide",
        initial_sidebar_state="collapsed",
    )
    _render_chrome()

    if not get_session().has_keys:
        key_tab.render_welcome()
        return

    screens = {
        "📝 Entry": text_tab.render,
        "📁 Files": file_tab.render,
        "🔑 Keys": key_tab.render,
    }
    for tab, render in zip(st.tabs(list(screens)), screens.values()):
        with tab:
            render()


main()
