"""Daily usage aggregation and dashboard summary metrics."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

import pandas as pd

from neon_usage.config import (
    METRIC_CHILD_BRANCH_BYTES,
    METRIC_COMPUTE_UNIT_SECONDS,
    METRIC_EXTRA_BRANCHES,
    METRIC_INSTANT_RESTORE_BYTES,
    METRIC_PRIVATE_TRANSFER_BYTES,
    METRIC_PUBLIC_TRANSFER_BYTES,
    METRIC_ROOT_BRANCH_BYTES,
)
from neon_usage.transformers import ConsumptionPayload, parse_consumption_payload

logger = logging.getLogger(__name__)

BYTES_PER_GIB = 1024**3
SECONDS_PER_HOUR = 3600

# metric_name -> (DailyUsage field, divisor)
METRIC_FIELD_MAP: dict[str, tuple[str, float]] = {
    METRIC_COMPUTE_UNIT_SECONDS: ("compute", 1),
    METRIC_ROOT_BRANCH_BYTES: ("storage_root", BYTES_PER_GIB),
    METRIC_CHILD_BRANCH_BYTES: ("storage_child", BYTES_PER_GIB),
    METRIC_INSTANT_RESTORE_BYTES: ("storage_history", BYTES_PER_GIB),
    METRIC_PUBLIC_TRANSFER_BYTES: ("data_transfer", BYTES_PER_GIB),
    METRIC_PRIVATE_TRANSFER_BYTES: ("data_transfer", BYTES_PER_GIB),
    METRIC_EXTRA_BRANCHES: ("extra_branches", 1),
}

USAGE_COLUMNS = [
    "date",
    "compute",
    "storage_root",
    "storage_child",
    "storage_history",
    "data_transfer",
    "extra_branches",
]
STORAGE_COLUMNS = ["storage_root", "storage_child", "storage_history"]


@dataclass
class DailyUsage:
    """Usage summed over one UTC calendar day.

    ``date`` is the UTC date of ``timeframe_start``, so two entries whose
    timestamps fall on the same UTC day (``T00:00Z`` and ``T12:00Z``) merge
    into one record. With daily granularity every entry starts at midnight.
    """

    date: date
    compute: float = 0.0  # seconds
    storage_root: float = 0.0  # GiB
    storage_child: float = 0.0  # GiB
    storage_history: float = 0.0  # GiB
    data_transfer: float = 0.0  # GiB, public + private egress
    extra_branches: float = 0.0  # count

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def aggregate_daily_usage(payload: ConsumptionPayload | Mapping[str, Any] | None) -> list[DailyUsage]:
    """Sum every project's and period's consumption into one record per date.

    Accepts a raw decoded JSON document or an already parsed payload. Metric
    names outside ``METRIC_FIELD_MAP`` are ignored so new upstream metrics do
    not break aggregation.
    """
    if not isinstance(payload, ConsumptionPayload):
        payload = parse_consumption_payload(payload)

    by_date: dict[date, DailyUsage] = {}
    ignored: set[str] = set()

    for project in payload.projects:
        for period in project.periods:
            for day in period.consumption:
                record = by_date.get(day.timeframe_start)
                if record is None:
                    record = by_date[day.timeframe_start] = DailyUsage(date=day.timeframe_start)

                for sample in day.metrics:
                    target = METRIC_FIELD_MAP.get(sample.metric_name)
                    if target is None:
                        ignored.add(sample.metric_name)
                        continue
                    field_name, divisor = target
                    setattr(record, field_name, getattr(record, field_name) + sample.value / divisor)

    if ignored:
        logger.debug("Ignored unrecognized metrics: %s", ", ".join(sorted(ignored)))

    return sorted(by_date.values(), key=lambda record: record.date)


def build_usage_df(records: Iterable[DailyUsage]) -> pd.DataFrame:
    df = pd.DataFrame([record.to_dict() for record in records], columns=USAGE_COLUMNS)
    if df.empty:
        return df.assign(storage_total=pd.Series(dtype=float), compute_hours=pd.Series(dtype=float))

    df["date"] = pd.to_datetime(df["date"])
    df["storage_total"] = df[STORAGE_COLUMNS].sum(axis=1)
    df["compute_hours"] = df["compute"] / SECONDS_PER_HOUR
    return df.sort_values("date").reset_index(drop=True)


def compute_usage_kpis(usage_df: pd.DataFrame) -> dict[str, Any]:
    """Reduce the daily series to the four dashboard summary values.

    Compute, storage and transfer are additive; extra branches use the peak.
    """
    days = len(usage_df)
    if usage_df.empty:
        return {
            "days": 0,
            "total_compute_hours": 0.0,
            "avg_storage_gib": 0.0,
            "total_transfer_gib": 0.0,
            "peak_extra_branches": 0.0,
        }

    total_storage = float(usage_df[STORAGE_COLUMNS].to_numpy().sum())
    return {
        "days": days,
        "total_compute_hours": float(usage_df["compute"].sum()) / SECONDS_PER_HOUR,
        "avg_storage_gib": total_storage / days,
        "total_transfer_gib": float(usage_df["data_transfer"].sum()),
        "peak_extra_branches": float(usage_df["extra_branches"].max()),
    }


def build_storage_breakdown(usage_df: pd.DataFrame) -> pd.DataFrame:
    """Long-format storage series for stacked charts."""
    if usage_df.empty:
        return pd.DataFrame(columns=["date", "storage_type", "gib"])

    labels = {
        "storage_root": "Root branches",
        "storage_child": "Child branches",
        "storage_history": "Restore history",
    }
    melted = usage_df.melt(
        id_vars=["date"],
        value_vars=STORAGE_COLUMNS,
        var_name="storage_type",
        value_name="gib",
    )
    melted["storage_type"] = melted["storage_type"].map(labels)
    return melted
