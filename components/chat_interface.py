"""Chat transcript component for data-chat"""

import streamlit as st
from typing import Callable

from config import get_settings
from core import EntryKind, Role, SessionState, TranscriptEntry
from utils import ChartHandler

CURSOR = "▌"


def render_transcript(state: SessionState):
    """Render every entry of the transcript"""
    for index, entry in enumerate(state.transcript):
        with st.chat_message(_avatar_role(entry)):
            render_entry(entry, index)


def render_entry(entry: TranscriptEntry, index: int):
    """Render a single transcript entry according to its kind"""
    settings = get_settings()
    chart_handler = ChartHandler(height=settings.chart_height)

    if entry.kind is EntryKind.ERROR:
        st.error(entry.content)

    elif entry.kind is EntryKind.DASHBOARD:
        if entry.is_loading:
            st.caption("⏳ Building your dashboard...")
            return
        summary = chart_handler.get_charts_summary(entry.content)
        st.caption(f"📊 Dashboard with {summary['total']} charts")
        chart_handler.display_dashboard(entry.content, key_prefix=f"dashboard_{index}")

    elif entry.kind is EntryKind.CHART:
        chart_handler.display_chart(entry.content, key=f"chart_{index}")

    else:
        if entry.is_loading and not entry.content:
            st.caption("Thinking...")
        else:
            st.markdown(entry.content + (CURSOR if entry.is_loading else ""))


def live_entry_renderer(placeholder) -> Callable[[SessionState], None]:
    """
    Build a state listener that redraws the trailing entry into a placeholder
    while a turn is in progress.
    """
    def listener(state: SessionState):
        entry = state.last_entry
        if entry is None or entry.role is not Role.MODEL:
            return
        # Finished dashboards are drawn by the rerun that follows the turn
        if entry.kind is EntryKind.DASHBOARD and not entry.is_loading:
            return
        with placeholder.container():
            render_entry(entry, len(state.transcript) - 1)

    return listener


def render_welcome_message():
    """Render the empty-state message before any file is uploaded"""
    st.markdown("""
    ### 👋 Unlock insights from your data

    To get started, upload a CSV, TSV, JSON or Excel file in the sidebar.

    **Then you can:**
    - 📊 **Build a dashboard** - a set of charts chosen for your data
    - 🔍 **Explore the dataset** - structure, quality and distributions
    - 💡 **Generate insights** - trends and findings in plain language
    """)


def _avatar_role(entry: TranscriptEntry) -> str:
    return "user" if entry.role is Role.USER else "assistant"
