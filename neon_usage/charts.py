"""Plotly chart builders for the Streamlit dashboard."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

PLOTLY_TEMPLATE = "plotly_white"
COMPUTE_BAR_COLOR = "#43a2fb"


def empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        x=0.5,
        y=0.5,
        text=message,
        showarrow=False,
        xref="paper",
        yref="paper",
        font={"size": 14},
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.update_layout(template=PLOTLY_TEMPLATE, height=360, margin=dict(l=10, r=10, t=40, b=10))
    return fig


def daily_compute_chart(usage_df: pd.DataFrame) -> go.Figure:
    if usage_df.empty:
        return empty_figure("No usage data for the last 30 days")

    fig = px.bar(
        usage_df,
        x="date",
        y="compute",
        title="Daily Compute Usage",
        labels={"date": "Date", "compute": "Compute Seconds"},
        template=PLOTLY_TEMPLATE,
    )
    fig.update_traces(
        marker_color=COMPUTE_BAR_COLOR,
        hovertemplate="%{x|%b %d}<br>%{y:,.0f} sec<extra></extra>",
    )
    fig.update_xaxes(tickformat="%b %d")
    fig.update_layout(height=360, margin=dict(l=10, r=10, t=50, b=10))
    return fig


def storage_breakdown_chart(storage_df: pd.DataFrame) -> go.Figure:
    if storage_df.empty:
        return empty_figure("No storage data for the last 30 days")

    fig = px.area(
        storage_df,
        x="date",
        y="gib",
        color="storage_type",
        title="Daily Storage (GiB)",
        labels={"date": "Date", "gib": "GiB", "storage_type": "Storage"},
        template=PLOTLY_TEMPLATE,
    )
    fig.update_xaxes(tickformat="%b %d")
    fig.update_layout(height=360, margin=dict(l=10, r=10, t=50, b=10), legend_title_text="")
    return fig


def data_transfer_chart(usage_df: pd.DataFrame) -> go.Figure:
    if usage_df.empty:
        return empty_figure("No data transfer for the last 30 days")

    fig = px.line(
        usage_df,
        x="date",
        y="data_transfer",
        markers=True,
        title="Daily Data Transfer (GiB)",
        labels={"date": "Date", "data_transfer": "GiB"},
        template=PLOTLY_TEMPLATE,
    )
    fig.update_traces(line={"width": 2})
    fig.update_xaxes(tickformat="%b %d")
    fig.update_layout(height=360, margin=dict(l=10, r=10, t=50, b=10))
    return fig
