"""Dataset preview and suggestion chips for data-chat"""

import streamlit as st
import pandas as pd
from typing import Callable, List, Tuple

from config import get_settings
from core import SessionState, Task

SUGGESTIONS: List[Tuple[Task, str, str]] = [
    (Task.DASHBOARD, "📊 Analysis Dashboard",
     "Create a dashboard with the most informative charts for this dataset."),
    (Task.EDA, "🔍 Data Analysis",
     "Give me an exploratory data analysis of this dataset."),
    (Task.INSIGHTS, "💡 Generate Insights",
     "What are the key insights and trends in this data?"),
]


def render_data_preview(state: SessionState):
    """Show the first rows of the parsed dataset and its raw text"""
    settings = get_settings()
    rows = state.parsed_data or ()

    st.subheader(f"📄 {state.file.name}")

    df = pd.DataFrame(list(rows[:settings.preview_rows]))
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Rows", len(rows))
    with col2:
        st.metric("Columns", len(df.columns))

    st.dataframe(df, use_container_width=True, hide_index=True)

    with st.expander("Raw data", expanded=False):
        raw = state.raw_data or ""
        st.code(raw[:5000] + ("\n..." if len(raw) > 5000 else ""), language=None)


def render_suggestion_chips(on_select: Callable[[Task, str], None], disabled: bool = False):
    """One button per task; clicking sends its canned query"""
    st.markdown("**Try one of these:**")
    columns = st.columns(len(SUGGESTIONS))
    for column, (task, label, query) in zip(columns, SUGGESTIONS):
        with column:
            st.button(
                label,
                key=f"suggest_{task.name}",
                help=query,
                disabled=disabled,
                use_container_width=True,
                on_click=on_select,
                args=(task, query)
            )
