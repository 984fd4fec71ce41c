"""Chart rendering utilities for data-chat"""

import streamlit as st
from typing import Dict, Any, List, Optional, Sequence

from core.state import ChartSpec


DEFAULT_COLORS = ["#22d3ee", "#a78bfa", "#f472b6", "#facc15", "#4ade80", "#fb923c"]


class ChartHandler:
    """Turn ChartSpecs into Vega-Lite specs and display them"""

    def __init__(self, height: int = 350):
        self.height = height

    def to_vega_lite(self, chart: ChartSpec) -> Dict[str, Any]:
        """
        Build a Vega-Lite specification for a chart.

        Multi-series bar and line charts are folded into long format so each
        data key becomes its own colored series.
        """
        spec: Dict[str, Any] = {
            "data": {"values": [dict(row) for row in chart.data]},
            "height": self.height,
        }
        if chart.title:
            spec["title"] = chart.title

        colors = list(chart.colors) or DEFAULT_COLORS

        if chart.chart_type == "pie":
            spec["mark"] = {"type": "arc", "tooltip": True}
            spec["encoding"] = {
                "theta": {"field": chart.pie_data_key, "type": "quantitative"},
                "color": {
                    "field": chart.pie_name_key,
                    "type": "nominal",
                    "scale": {"range": colors},
                },
            }
            return spec

        if chart.chart_type == "scatter":
            spec["mark"] = {"type": "point", "tooltip": True, "color": colors[0]}
            spec["encoding"] = {
                "x": {"field": chart.x_axis_key, "type": "quantitative"},
                "y": {"field": chart.y_axis_key, "type": "quantitative"},
            }
            return spec

        mark = "bar" if chart.chart_type == "bar" else "line"
        spec["transform"] = [{"fold": list(chart.data_keys), "as": ["series", "value"]}]
        spec["mark"] = {"type": mark, "tooltip": True}
        if mark == "line":
            spec["mark"]["point"] = True
        spec["encoding"] = {
            "x": {"field": chart.x_axis_key, "type": "nominal" if mark == "bar" else "ordinal", "sort": None},
            "y": {"field": "value", "type": "quantitative"},
            "color": {
                "field": "series",
                "type": "nominal",
                "scale": {"domain": list(chart.data_keys), "range": colors},
            },
        }
        if mark == "bar" and len(chart.data_keys) > 1:
            spec["encoding"]["xOffset"] = {"field": "series"}
        return spec

    def display_chart(self, chart: ChartSpec, key: Optional[str] = None):
        """Display a single chart"""
        st.vega_lite_chart(self.to_vega_lite(chart), use_container_width=True, key=key)

    def display_dashboard(self, charts: Sequence[ChartSpec], key_prefix: str = "dashboard"):
        """Display charts in a two-column grid"""
        if not charts:
            st.info("The dashboard did not contain any charts.")
            return

        columns = st.columns(2)
        for idx, chart in enumerate(charts):
            with columns[idx % 2]:
                self.display_chart(chart, key=f"{key_prefix}_{idx}")

    def get_charts_summary(self, charts: Sequence[ChartSpec]) -> Dict[str, Any]:
        """Get summary statistics about a set of charts"""
        type_counts: Dict[str, int] = {}
        for chart in charts:
            type_counts[chart.chart_type] = type_counts.get(chart.chart_type, 0) + 1

        titles: List[str] = [chart.title for chart in charts if chart.title]
        return {
            'total': len(charts),
            'types': type_counts,
            'titles': titles
        }
