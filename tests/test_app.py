from datetime import date
from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

from neon_usage.analytics import DailyUsage
from neon_usage.config import (
    CONSUMPTION_HISTORY_ENDPOINT,
    ENV_NEON_API_BASE_URL,
    ENV_NEON_API_KEY,
    ENV_NEON_ORG_ID,
    PROJECTS_ENDPOINT,
)
from neon_usage.neon_client import NeonAPIClient, NeonAPIError
from neon_usage.service import LatestRequestTracker

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")
RUN_TIMEOUT = 30

PROJECTS_PAYLOAD = {"projects": [{"id": "proj_a", "name": "Alpha"}]}


def _usage_payload(**metrics: float) -> dict:
    return {
        "projects": [
            {
                "project_id": "proj_a",
                "periods": [
                    {
                        "consumption": [
                            {
                                "timeframe_start": "2026-02-01T00:00:00Z",
                                "metrics": [
                                    {"metric_name": name, "value": value} for name, value in metrics.items()
                                ],
                            }
                        ]
                    }
                ],
            }
        ]
    }


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    st.cache_data.clear()
    monkeypatch.setenv(ENV_NEON_API_KEY, "test-key")
    monkeypatch.setenv(ENV_NEON_ORG_ID, "org-test")
    monkeypatch.delenv(ENV_NEON_API_BASE_URL, raising=False)
    yield
    st.cache_data.clear()


def _stub_api(monkeypatch, consumption) -> None:
    def fake_get(self, path, *, params=None):
        if path == PROJECTS_ENDPOINT:
            return PROJECTS_PAYLOAD
        assert path == CONSUMPTION_HISTORY_ENDPOINT
        if isinstance(consumption, Exception):
            raise consumption
        return consumption

    monkeypatch.setattr(NeonAPIClient, "_get", fake_get)


def _run() -> AppTest:
    at = AppTest.from_file(APP_PATH, default_timeout=RUN_TIMEOUT)
    at.run()
    assert not at.exception
    return at


def test_empty_result_shows_no_data_state(monkeypatch) -> None:
    _stub_api(monkeypatch, {"projects": []})

    at = _run()

    assert any("No consumption data" in info.value for info in at.info)
    assert not at.error
    assert not at.metric


def test_upstream_error_shows_failed_to_load_state(monkeypatch) -> None:
    _stub_api(monkeypatch, NeonAPIError("Neon API Error: Bad Gateway", status_code=502))

    at = _run()

    assert len(at.error) == 1
    assert "Failed to load consumption data" in at.error[0].value
    assert "Bad Gateway" in at.error[0].value
    assert not at.metric


def test_missing_settings_show_configuration_banner(monkeypatch) -> None:
    monkeypatch.delenv(ENV_NEON_API_KEY, raising=False)
    monkeypatch.delenv(ENV_NEON_ORG_ID, raising=False)

    at = _run()

    assert len(at.error) == 1
    assert "Configuration Error" in at.error[0].value
    assert ENV_NEON_API_KEY in at.error[0].value
    assert ENV_NEON_ORG_ID in at.error[0].value


def test_dashboard_shows_fractional_peak_branches(monkeypatch) -> None:
    _stub_api(
        monkeypatch,
        _usage_payload(compute_unit_seconds=7200, extra_branches_month=0.0333),
    )

    at = _run()

    metrics = {metric.label: metric.value for metric in at.metric}
    assert metrics["Peak Extra Branches"] == "0.0333"
    assert metrics["Total Compute"] == "2.0 hrs"
    assert not at.error


class StaleTracker(LatestRequestTracker):
    def is_current(self, ticket: int) -> bool:
        return False


def test_stale_result_does_not_replace_latest_shown_usage(monkeypatch) -> None:
    _stub_api(monkeypatch, _usage_payload(compute_unit_seconds=7200))

    at = AppTest.from_file(APP_PATH, default_timeout=RUN_TIMEOUT)
    at.session_state["usage_tracker"] = StaleTracker()
    at.session_state["usage_result"] = [DailyUsage(date=date(2026, 2, 1), compute=3600)]
    at.run()

    assert not at.exception
    metrics = {metric.label: metric.value for metric in at.metric}
    assert metrics["Total Compute"] == "1.0 hrs"
