"""
Secure Diary Web — File Tab
============================

Encrypt any uploaded file into a single envelope (``<name>.enc``), or decrypt
an envelope: ``.txt`` payloads such as diary entries are shown inline,
everything else is offered as a download.
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
import diary_files  # noqa: E402

from key_store import get_session  # noqa: E402


DECRYPT_FAILED = "Error decrypting file. Make sure you're using the correct keys."


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the File encryption / decryption tab."""

    enc_col, dec_col = st.columns(2)

    with enc_col:
        st.subheader("Encrypt File")
        _render_encrypt()

    with dec_col:
        st.subheader("Decrypt File")
        _render_decrypt()


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _render_encrypt() -> None:
    session = get_session()
    uploaded = st.file_uploader("Choose File to Encrypt", key="file_encrypt_upload")
    if uploaded is None:
        return
    st.caption(f"**{uploaded.name}**  —  {diary_files.human_file_size(uploaded.size)}")

    if st.button("🔒 Encrypt File", type="primary", use_container_width=True, key="file_encrypt_btn"):
        try:
            with st.spinner("Encrypting…"):
                envelope = session.encrypt(uploaded.getvalue())
        except diary_crypto.DiaryCryptoError as e:
            st.error(f"Error encrypting content: {e}")
            return
        out_name = diary_files.encrypted_filename(uploaded.name)
        st.success(f"Encryption successful!  ({diary_files.human_file_size(len(envelope))})")
        st.download_button(
            f"📥 Download {out_name}",
            data=envelope,
            file_name=out_name,
            mime="application/octet-stream",
            key="file_encrypt_download",
        )


def _render_decrypt() -> None:
    session = get_session()
    uploaded = st.file_uploader(
        "Choose File to Decrypt",
        type=["enc"],
        key="file_decrypt_upload",
    )
    if uploaded is None:
        return
    st.caption(f"**{uploaded.name}**  —  {diary_files.human_file_size(uploaded.size)}")

    if st.button("🔓 Decrypt File", type="primary", use_container_width=True, key="file_decrypt_btn"):
        try:
            with st.spinner("Decrypting…"):
                plaintext = session.decrypt(uploaded.getvalue())
        except diary_crypto.DecryptionError:
            # Same message for every failure so the UI is not an oracle.
            st.error(DECRYPT_FAILED)
            return

        out_name = diary_files.decrypted_filename(uploaded.name)
        if diary_files.is_text_payload(out_name):
            st.markdown("**Decrypted Text**")
            st.text_area(
                "Decrypted Text",
                value=diary_files.decode_text(plaintext),
                height=260,
                key="file_decrypted_text",
                label_visibility="collapsed",
            )
        else:
            st.success(f"Decryption successful!  ({diary_files.human_file_size(len(plaintext))})")
            st.download_button(
                f"📥 Download {out_name}",
                data=plaintext,
                file_name=out_name,
                mime="application/octet-stream",
                key="file_decrypt_download",
            )
