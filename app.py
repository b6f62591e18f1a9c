"""Streamlit entrypoint for the Neon usage dashboard."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, time, timezone

import streamlit as st
from dotenv import load_dotenv

from neon_usage.analytics import (
    DailyUsage,
    build_storage_breakdown,
    build_usage_df,
    compute_usage_kpis,
)
from neon_usage.charts import daily_compute_chart, data_transfer_chart, storage_breakdown_chart
from neon_usage.config import (
    CACHE_TTL_SECONDS,
    ENV_LOG_LEVEL,
    ConfigurationError,
    Settings,
    resolve_log_level,
)
from neon_usage.fetchers import Project
from neon_usage.neon_client import NeonAPIError
from neon_usage.service import LatestRequestTracker, fetch_usage_by_projects, list_org_projects
from neon_usage.ui import (
    apply_app_styles,
    render_configuration_error,
    render_header,
    render_kpi_cards,
    render_load_error,
    render_no_data,
    render_sidebar,
)

logger = logging.getLogger(__name__)


@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def load_projects(settings: Settings) -> list[Project]:
    return list_org_projects(settings)


@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def load_usage(settings: Settings, project_ids: tuple[str, ...], as_of: str) -> list[DailyUsage]:
    now = datetime.combine(date.fromisoformat(as_of), time.min, tzinfo=timezone.utc)
    return fetch_usage_by_projects(settings, list(project_ids), now=now)


def _request_tracker() -> LatestRequestTracker:
    if "usage_tracker" not in st.session_state:
        st.session_state["usage_tracker"] = LatestRequestTracker()
    return st.session_state["usage_tracker"]


def render_dashboard(records: list[DailyUsage]) -> None:
    usage_df = build_usage_df(records)
    render_kpi_cards(compute_usage_kpis(usage_df))

    st.plotly_chart(daily_compute_chart(usage_df), width="stretch")

    col1, col2 = st.columns(2)
    col1.plotly_chart(storage_breakdown_chart(build_storage_breakdown(usage_df)), width="stretch")
    col2.plotly_chart(data_transfer_chart(usage_df), width="stretch")

    with st.expander("Daily records", expanded=False):
        st.dataframe(usage_df, width="stretch", hide_index=True)


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=resolve_log_level(os.getenv(ENV_LOG_LEVEL)))

    st.set_page_config(page_title="Neon Consumption", layout="wide")
    apply_app_styles()

    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        render_configuration_error(str(exc))
        return

    render_header(settings.org_id)

    try:
        projects = load_projects(settings)
    except NeonAPIError as exc:
        logger.warning("Failed to load project list: %s", exc)
        st.sidebar.warning(f"Project list unavailable: {exc}")
        projects = []

    filters = render_sidebar(projects)
    as_of = datetime.now(timezone.utc).date().isoformat()

    tracker = _request_tracker()
    ticket = tracker.begin()
    with st.spinner("Fetching consumption history..."):
        try:
            records = load_usage(settings, filters.project_ids, as_of)
        except NeonAPIError as exc:
            logger.error("Failed to fetch neon usage: %s", exc)
            render_load_error(str(exc))
            return

    if tracker.is_current(ticket):
        st.session_state["usage_result"] = records
    else:
        logger.info("Discarding stale usage result for request %d.", ticket)

    records = st.session_state.get("usage_result", [])
    if not records:
        render_no_data()
        return

    render_dashboard(records)


if __name__ == "__main__":
    main()
