"""Entry points that combine fetching and aggregation for the dashboard."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import datetime, timezone

from neon_usage.analytics import DailyUsage, aggregate_daily_usage
from neon_usage.config import Settings
from neon_usage.fetchers import (
    ConsumptionQuery,
    ConsumptionSource,
    Project,
    build_time_window,
    fetch_consumption_history,
    fetch_projects,
)
from neon_usage.neon_client import NeonAPIClient


def get_neon_usage(
    client: ConsumptionSource,
    org_id: str,
    project_ids: Sequence[str] | None = None,
    *,
    now: datetime | None = None,
) -> list[DailyUsage]:
    """Fetch the last 30 days plus today and aggregate them into daily records.

    A non-empty ``project_ids`` narrows the upstream query; aggregation is the
    same either way.
    """
    date_from, date_to = build_time_window(now or datetime.now(timezone.utc))
    query = ConsumptionQuery(
        org_id=org_id,
        date_from=date_from,
        date_to=date_to,
        project_ids=tuple(project_ids or ()),
    )
    return aggregate_daily_usage(fetch_consumption_history(client, query))


def fetch_usage_by_projects(
    settings: Settings,
    project_ids: Sequence[str],
    *,
    now: datetime | None = None,
) -> list[DailyUsage]:
    with NeonAPIClient.from_settings(settings) as client:
        return get_neon_usage(client, settings.org_id, project_ids or None, now=now)


def list_org_projects(settings: Settings) -> list[Project]:
    with NeonAPIClient.from_settings(settings) as client:
        return fetch_projects(client, settings.org_id)


class LatestRequestTracker:
    """Last-request-wins gate for results that may complete out of order.

    Call ``begin()`` before issuing a request and ``is_current(ticket)`` once it
    completes; only the most recently issued ticket is current.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest
