"""Strict parsing of consumption history payloads into typed records.

The upstream document is nested ``projects -> periods -> consumption -> metrics``.
Every level is parsed with an explicit policy instead of trusting the shape:

* ``projects``, ``periods``, ``consumption`` and ``metrics`` default to an empty
  list when absent or null. A value of the wrong type is also treated as empty,
  with a warning.
* List elements that are not objects are skipped.
* A day without a parseable ``timeframe_start`` is skipped, since it has no key.
* A sample without a string ``metric_name`` is skipped.
* A malformed ``value`` contributes zero.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricSample:
    metric_name: str
    value: float


@dataclass(frozen=True)
class ConsumptionDay:
    timeframe_start: date
    metrics: tuple[MetricSample, ...] = ()


@dataclass(frozen=True)
class BillingPeriod:
    consumption: tuple[ConsumptionDay, ...] = ()


@dataclass(frozen=True)
class ProjectConsumption:
    project_id: str | None = None
    periods: tuple[BillingPeriod, ...] = ()


@dataclass(frozen=True)
class ConsumptionPayload:
    projects: tuple[ProjectConsumption, ...] = ()


def parse_consumption_payload(payload: Any) -> ConsumptionPayload:
    if not isinstance(payload, Mapping):
        logger.warning("Consumption payload is not an object; treating it as empty.")
        return ConsumptionPayload()

    projects = tuple(
        _parse_project(raw) for raw in _objects(payload, "projects", context="payload")
    )
    return ConsumptionPayload(projects=projects)


def parse_timeframe_start(value: Any) -> date | None:
    """Return the UTC calendar date of an ISO-8601 timestamp, or None if unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).date()


def coerce_metric_value(value: Any) -> float:
    """Convert a raw metric value to a float; malformed values count as zero."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if not math.isfinite(number):
        return 0.0
    return number


def _parse_project(raw: Mapping[str, Any]) -> ProjectConsumption:
    project_id = raw.get("project_id")
    context = f"project {project_id}" if project_id else "project"
    periods = tuple(_parse_period(period, context) for period in _objects(raw, "periods", context=context))
    return ProjectConsumption(
        project_id=str(project_id) if project_id else None,
        periods=periods,
    )


def _parse_period(raw: Mapping[str, Any], context: str) -> BillingPeriod:
    days: list[ConsumptionDay] = []
    for day in _objects(raw, "consumption", context=context):
        timeframe_start = parse_timeframe_start(day.get("timeframe_start"))
        if timeframe_start is None:
            logger.warning(
                "Skipping consumption entry in %s with invalid timeframe_start %r.",
                context,
                day.get("timeframe_start"),
            )
            continue
        days.append(
            ConsumptionDay(
                timeframe_start=timeframe_start,
                metrics=_parse_metrics(day, context),
            )
        )
    return BillingPeriod(consumption=tuple(days))


def _parse_metrics(raw: Mapping[str, Any], context: str) -> tuple[MetricSample, ...]:
    samples: list[MetricSample] = []
    for metric in _objects(raw, "metrics", context=context):
        name = metric.get("metric_name")
        if not isinstance(name, str) or not name:
            continue

        raw_value = metric.get("value")
        value = coerce_metric_value(raw_value)
        if value == 0.0 and not _is_zero_literal(raw_value):
            logger.warning("Metric %s in %s has malformed value %r; counting as zero.", name, context, raw_value)
        samples.append(MetricSample(metric_name=name, value=value))
    return tuple(samples)


def _objects(container: Mapping[str, Any], key: str, *, context: str) -> list[Mapping[str, Any]]:
    items = container.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        logger.warning("Expected '%s' in %s to be a list, got %s.", key, context, type(items).__name__)
        return []

    objects = [item for item in items if isinstance(item, Mapping)]
    if len(objects) != len(items):
        logger.warning("Skipped %d non-object entries in '%s' of %s.", len(items) - len(objects), key, context)
    return objects


def _is_zero_literal(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        try:
            return float(value.strip()) == 0
        except ValueError:
            return False
    return False
