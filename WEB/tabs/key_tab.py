"""
Secure Diary Web — Keys
========================

Two views:
  • No keys yet — generate a key pair, import a ``diary-keys.json`` file,
    or paste the public / private keys manually
  • Keys loaded — fingerprint, export ``diary-keys.json``, logout
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import diary_crypto  # noqa: E402
from diary_keys import KEY_FILE_NAME, key_fingerprint  # noqa: E402

from key_store import get_session  # noqa: E402


# ---------------------------------------------------------------------------
# Welcome screen (no keys)
# ---------------------------------------------------------------------------

def render_welcome() -> None:
    """Render the key setup screen shown until a key pair is loaded."""
    session = get_session()

    st.markdown(
        "<div class='diary-welcome'>Get started by generating new keys "
        "or importing existing ones</div>",
        unsafe_allow_html=True,
    )

    if st.button("Generate New Keys", type="primary", use_container_width=True, key="keys_generate"):
        with st.spinner("Generating 2048-bit RSA key pair…"):
            try:
                session.generate()
            except diary_crypto.KeyGenerationError as e:
                st.error(f"Key generation failed: {e}")
                return
        st.rerun()

    st.markdown("<div class='diary-or'>OR</div>", unsafe_allow_html=True)

    file_col, manual_col = st.columns(2)

    # ---- Import from file ----
    with file_col:
        st.subheader("Import Keys from File")
        key_file = st.file_uploader("Key file", type=["json"], key="keys_file_upload")
        if key_file is not None and st.button("Import File", use_container_width=True, key="keys_file_btn"):
            try:
                session.import_key_file(key_file.getvalue())
            except diary_crypto.InvalidKeyFormatError:
                st.error("Invalid key file. Please select a valid key file.")
            else:
                st.rerun()

    # ---- Manual import ----
    with manual_col:
        st.subheader("Import Keys Manually")
        public_text = st.text_area(
            "Public Key",
            height=120,
            placeholder="Paste your public key here...",
            key="keys_manual_public",
        )
        private_text = st.text_area(
            "Private Key",
            height=120,
            placeholder="Paste your private key here...",
            key="keys_manual_private",
        )
        if st.button("Import Keys", use_container_width=True, key="keys_manual_btn"):
            if not public_text.strip() or not private_text.strip():
                st.error("Please provide both public and private keys.")
            else:
                try:
                    session.import_keys(public_text, private_text)
                except diary_crypto.InvalidKeyFormatError:
                    st.error("Invalid key format. Please check your keys and try again.")
                else:
                    st.rerun()


# ---------------------------------------------------------------------------
# Key management (keys loaded)
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the Keys tab for a session with a loaded key pair."""
    session = get_session()
    pair = session.keypair

    with st.container(border=True):
        st.markdown("**Active key pair**")
        st.caption(
            f"RSA-{pair.load_public_key().key_size}  •  "
            f"fingerprint {key_fingerprint(pair.public_key)}"
        )
        public_b64, _ = diary_crypto.export_keypair(pair)
        st.code(public_b64, language=None)

    export_col, logout_col = st.columns(2)

    with export_col:
        st.download_button(
            "📥 Export Keys",
            data=session.export_key_file(),
            file_name=KEY_FILE_NAME,
            mime="application/json",
            key="keys_export",
            use_container_width=True,
        )

    with logout_col:
        confirm = st.checkbox(
            "I have exported my keys (they cannot be recovered after logout)",
            key="keys_logout_confirm",
        )
        if st.button("Logout", disabled=not confirm, use_container_width=True, key="keys_logout"):
            session.logout()
            st.rerun()
