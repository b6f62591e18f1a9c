"""Data fetch orchestration for the project list and consumption history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Any, Protocol

from neon_usage.config import (
    DEFAULT_GRANULARITY,
    DEFAULT_LOOKBACK_DAYS,
    PROJECTS_PAGE_LIMIT,
    REQUESTED_METRICS,
)

logger = logging.getLogger(__name__)


class ConsumptionSource(Protocol):
    def list_projects(self, params: dict[str, Any]) -> dict[str, Any]: ...

    def get_consumption_history(self, params: dict[str, Any]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class Project:
    id: str
    name: str


@dataclass(frozen=True)
class ConsumptionQuery:
    org_id: str
    date_from: str
    date_to: str
    project_ids: tuple[str, ...] = ()
    metrics: tuple[str, ...] = REQUESTED_METRICS
    granularity: str = DEFAULT_GRANULARITY


def build_time_window(now: datetime, *, lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> tuple[str, str]:
    """Return the half-open ``[from, to)`` UTC window as ISO-8601 strings.

    ``from`` is midnight of ``now - lookback_days`` and ``to`` is the start of
    tomorrow so today's partial data is included. A naive ``now`` is read as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    start_dt = datetime.combine((now - timedelta(days=lookback_days)).date(), time.min, tzinfo=timezone.utc)
    end_dt_exclusive = datetime.combine((now + timedelta(days=1)).date(), time.min, tzinfo=timezone.utc)
    return _isoformat_utc(start_dt), _isoformat_utc(end_dt_exclusive)


def build_consumption_params(query: ConsumptionQuery) -> dict[str, Any]:
    params: dict[str, Any] = {
        "from": query.date_from,
        "to": query.date_to,
        "granularity": query.granularity,
        "org_id": query.org_id,
        "metrics": ",".join(query.metrics),
    }
    if query.project_ids:
        params["project_ids"] = ",".join(query.project_ids)
    return params


def fetch_consumption_history(client: ConsumptionSource, query: ConsumptionQuery) -> dict[str, Any]:
    payload = client.get_consumption_history(build_consumption_params(query))
    logger.info(
        "Fetched consumption history for org %s (%s projects filtered).",
        query.org_id,
        len(query.project_ids) or "no",
    )
    return payload


def fetch_projects(
    client: ConsumptionSource,
    org_id: str,
    *,
    limit: int = PROJECTS_PAGE_LIMIT,
) -> list[Project]:
    payload = client.list_projects({"org_id": org_id, "limit": str(limit)})
    return build_projects(payload.get("projects"))


def build_projects(rows: Any) -> list[Project]:
    if not isinstance(rows, list):
        return []

    projects: list[Project] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        project_id = str(row.get("id") or "").strip()
        if not project_id:
            continue
        projects.append(Project(id=project_id, name=str(row.get("name") or project_id)))
    return projects


def _isoformat_utc(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
