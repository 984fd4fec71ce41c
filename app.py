#!/usr/bin/env python3
"""
Data Chat - Streamlit app for conversational analysis of an uploaded dataset
"""

import streamlit as st

# Import configuration
from config import get_settings

# Import core modules
from core import Task
from core.session import SessionManager

# Import components
from components import (
    render_sidebar,
    render_transcript,
    live_entry_renderer,
    render_welcome_message,
    render_data_preview,
    render_suggestion_chips
)

# Import utilities
from utils import get_logger, run_async_with_timeout

# Initialize settings
settings = get_settings()

# Page configuration
st.set_page_config(
    page_title=settings.app_title,
    page_icon=settings.app_icon,
    layout=settings.app_layout,
    initial_sidebar_state=settings.sidebar_state
)

session_manager = SessionManager()


def queue_turn(task: Task, query: str):
    """Remember a query so the next run can stream it into the page"""
    st.session_state.pending_turn = (task, query)


def main():
    """Main application entry point"""

    render_sidebar(session_manager)

    state = session_manager.state

    if state.file is None:
        render_welcome_message()
    elif state.is_loading and state.parsed_data is None:
        with st.spinner("Processing file..."):
            st.caption("Getting your data ready for analysis.")
    elif state.transcript:
        render_transcript(state)
    elif state.has_dataset:
        render_data_preview(state)
        render_suggestion_chips(queue_turn, disabled=state.is_loading)

    pending = st.session_state.pop('pending_turn', None)

    if state.error:
        st.error(state.error)

    # Chat input (must be at root level due to Streamlit constraints)
    placeholder_text = "Ask a follow-up question..." if state.file is not None else "Upload a file to start..."
    prompt = st.chat_input(placeholder_text, disabled=state.file is None or state.is_loading)

    if prompt is not None:
        pending = (None, prompt)

    if pending is not None:
        task, query = pending
        handle_query(query, task)


def handle_query(query: str, task):
    """Run a query turn, redrawing the answer as it streams in"""
    orchestrator = session_manager.orchestrator

    if query and orchestrator.state.has_dataset:
        with st.chat_message("user"):
            st.markdown(query)
        with st.chat_message("assistant"):
            placeholder = st.empty()
        unsubscribe = orchestrator.subscribe(live_entry_renderer(placeholder))
    else:
        unsubscribe = None

    try:
        run_async_with_timeout(orchestrator.submit_query(query, task), settings.turn_timeout)
    except TimeoutError as e:
        get_logger().log("warning", str(e))
    finally:
        if unsubscribe is not None:
            unsubscribe()

    st.rerun()


if __name__ == "__main__":
    main()
