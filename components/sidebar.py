"""Sidebar component: upload, new chat and secure API key handling"""

import streamlit as st
import os

from config import get_settings
from core.session import SessionManager
from utils import DataFile, get_logger, run_async_with_timeout, mask_api_key, check_api_key


def render_sidebar(session_manager: SessionManager):
    """Render the sidebar"""

    settings = get_settings()

    with st.sidebar:
        col1, col2 = st.columns([3, 2])
        with col1:
            st.header(f"{settings.app_icon} {settings.app_title}")
        with col2:
            st.button(
                "➕ New Chat",
                on_click=session_manager.orchestrator.new_chat,
                disabled=session_manager.state.is_loading,
                use_container_width=True
            )

        render_file_upload(session_manager)

        st.divider()

        render_api_key_config(session_manager)

        if settings.show_debug:
            render_debug_logs(session_manager)


def render_file_upload(session_manager: SessionManager):
    """Render upload widget; a new selection starts ingestion"""
    settings = get_settings()

    def on_file_change():
        uploaded = st.session_state.get("dataset_upload")
        data_file = DataFile.from_upload(uploaded) if uploaded is not None else None
        try:
            run_async_with_timeout(session_manager.orchestrator.ingest_file(data_file), settings.turn_timeout)
        except TimeoutError as e:
            get_logger().log("warning", str(e))

    st.file_uploader(
        "Upload Data",
        type=settings.allowed_file_types,
        key="dataset_upload",
        on_change=on_file_change,
        disabled=session_manager.state.is_loading,
        help=f"Max size: {settings.max_file_size_mb}MB"
    )


def render_api_key_config(session_manager: SessionManager):
    """Render OpenAI key configuration; keys are session-only"""
    st.subheader("🤖 OpenAI")

    env_api_key = os.getenv("OPENAI_API_KEY")
    session_key = st.session_state.get('openai_api_key')

    if session_key:
        st.success(f"✅ Session key: {mask_api_key(session_key)}")
        if st.button("🗑️ Clear Key", key="clear_api_key"):
            session_manager.clear_api_key()
            st.rerun()
        return

    if env_api_key:
        st.success(f"✅ Using API key from environment: {mask_api_key(env_api_key)}")
        st.caption("Set in environment variable OPENAI_API_KEY")
        return

    api_key = st.text_input(
        "OpenAI API Key",
        type="password",
        placeholder="sk-...",
        help="Stored only in this browser session, never on disk."
    )

    if api_key:
        is_valid, message = check_api_key(api_key)
        if not is_valid:
            st.error(f"❌ Invalid API key: {message}")
        elif st.button("💾 Save API Key", key="save_api_key"):
            session_manager.set_api_key(api_key)
            st.rerun()
    else:
        st.info("🔑 Enter your OpenAI API key to enable analysis.")


def render_debug_logs(session_manager: SessionManager):
    """Render session info and recent log entries"""
    logger = get_logger()

    with st.expander("📊 Logs", expanded=False):
        st.json(session_manager.get_session_info())

        level = st.selectbox("Level", ["ALL", "INFO", "WARNING", "ERROR", "MODEL"], key="log_level_filter")
        logs = logger.get_recent_logs(
            count=30,
            level_filter=None if level == "ALL" else level
        )

        if not logs:
            st.caption("No log entries yet")
        for entry in reversed(logs):
            st.caption(f"`{entry['timestamp']}` **{entry['level']}** {entry['message']}")

        if st.button("Clear logs", key="clear_logs"):
            logger.clear_recent()
            st.rerun()
