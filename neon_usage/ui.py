"""UI helpers for Streamlit layout and controls."""

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from neon_usage.fetchers import Project


@dataclass(frozen=True)
class DashboardFilters:
    project_ids: tuple[str, ...]
    refresh_clicked: bool


def apply_app_styles() -> None:
    st.markdown(
        """
        <style>
            .block-container {
                padding-top: 1rem;
                padding-bottom: 2rem;
                max-width: 1150px;
            }
            [data-testid="stSidebar"] {
                border-right: 1px solid #e5e7eb;
            }
            [data-testid="metric-container"] {
                border: 1px solid #e5e7eb;
                border-radius: 8px;
                padding: 10px 12px;
                background: #f8fafc;
            }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_header(org_id: str) -> None:
    left, right = st.columns([4, 1])
    left.title("Neon Consumption")
    left.caption(f"Usage for Organization `{org_id}`")
    right.markdown("Granularity: **Daily**")


def render_sidebar(projects: list[Project]) -> DashboardFilters:
    st.sidebar.header("Filters")

    names = {project.id: project.name for project in projects}
    selected = st.sidebar.multiselect(
        "Projects",
        options=list(names),
        format_func=lambda project_id: names.get(project_id, project_id),
        placeholder="All projects",
        help="Leave empty to aggregate across every project in the organization.",
    )

    refresh_clicked = st.sidebar.button("Refresh Data", type="primary")
    if refresh_clicked:
        st.cache_data.clear()

    return DashboardFilters(project_ids=tuple(sorted(selected)), refresh_clicked=refresh_clicked)


def format_kpi_values(kpis: dict[str, object]) -> dict[str, str]:
    # extra_branches_month is a branch-month quantity, so the peak is often fractional.
    return {
        "Total Compute": f"{kpis['total_compute_hours']:.1f} hrs",
        "Avg Storage": f"{kpis['avg_storage_gib']:.2f} GiB",
        "Data Transfer": f"{kpis['total_transfer_gib']:.2f} GiB",
        "Peak Extra Branches": f"{kpis['peak_extra_branches']:g}",
    }


def render_kpi_cards(kpis: dict[str, object]) -> None:
    values = format_kpi_values(kpis)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Compute", values["Total Compute"], help="Active compute time")
    c2.metric("Avg Storage", values["Avg Storage"], help="Root + Child + History")
    c3.metric("Data Transfer", values["Data Transfer"], help="Public + Private Egress")
    c4.metric("Peak Extra Branches", values["Peak Extra Branches"], help="Max concurrent extra branches")


def render_no_data() -> None:
    st.info("No consumption data found for the last 30 days.")


def render_load_error(message: str) -> None:
    st.error(f"Failed to load consumption data.\n\n{message}")


def render_configuration_error(message: str) -> None:
    st.error(f"Configuration Error: {message}. Set it in the environment or a `.env` file.")
