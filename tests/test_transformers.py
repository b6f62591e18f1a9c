from datetime import date

import pytest

from neon_usage.transformers import (
    ConsumptionPayload,
    MetricSample,
    coerce_metric_value,
    parse_consumption_payload,
    parse_timeframe_start,
)


def test_parse_consumption_payload_builds_typed_tree() -> None:
    payload = {
        "projects": [
            {
                "project_id": "proj_a",
                "periods": [
                    {
                        "period_id": "per_1",
                        "consumption": [
                            {
                                "timeframe_start": "2026-02-01T00:00:00Z",
                                "timeframe_end": "2026-02-02T00:00:00Z",
                                "metrics": [
                                    {"metric_name": "compute_unit_seconds", "value": 3600},
                                    {"metric_name": "root_branch_bytes_month", "value": "1024"},
                                ],
                            }
                        ],
                    }
                ],
            }
        ]
    }

    parsed = parse_consumption_payload(payload)

    project = parsed.projects[0]
    assert project.project_id == "proj_a"
    day = project.periods[0].consumption[0]
    assert day.timeframe_start == date(2026, 2, 1)
    assert day.metrics == (
        MetricSample("compute_unit_seconds", 3600.0),
        MetricSample("root_branch_bytes_month", 1024.0),
    )


@pytest.mark.parametrize("payload", [None, [], "projects", {}, {"projects": None}, {"projects": {"a": 1}}])
def test_parse_consumption_payload_treats_missing_or_malformed_projects_as_empty(payload) -> None:
    assert parse_consumption_payload(payload) == ConsumptionPayload()


def test_parse_consumption_payload_skips_bad_entries() -> None:
    payload = {
        "projects": [
            "not-a-project",
            {
                "periods": [
                    {
                        "consumption": [
                            {"timeframe_start": "garbage", "metrics": []},
                            {"metrics": [{"metric_name": "compute_unit_seconds", "value": 1}]},
                            {"timeframe_start": "2026-02-03T00:00:00Z"},
                            {
                                "timeframe_start": "2026-02-04T00:00:00Z",
                                "metrics": [
                                    {"value": 5},
                                    {"metric_name": 7, "value": 5},
                                    {"metric_name": "compute_unit_seconds", "value": None},
                                ],
                            },
                        ]
                    },
                    {"consumption": None},
                ]
            },
        ]
    }

    parsed = parse_consumption_payload(payload)

    assert len(parsed.projects) == 1
    days = parsed.projects[0].periods[0].consumption
    assert [day.timeframe_start for day in days] == [date(2026, 2, 3), date(2026, 2, 4)]
    assert days[0].metrics == ()
    assert days[1].metrics == (MetricSample("compute_unit_seconds", 0.0),)
    assert parsed.projects[0].periods[1].consumption == ()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2026-02-01T00:00:00Z", date(2026, 2, 1)),
        ("2026-02-01T00:00:00.000Z", date(2026, 2, 1)),
        ("2026-02-01T00:00:00+00:00", date(2026, 2, 1)),
        ("2026-02-01T22:00:00-05:00", date(2026, 2, 2)),
        ("2026-02-01", date(2026, 2, 1)),
        ("", None),
        ("yesterday", None),
        (1706745600, None),
        (None, None),
    ],
)
def test_parse_timeframe_start(raw, expected) -> None:
    assert parse_timeframe_start(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (10, 10.0),
        (2.5, 2.5),
        ("42", 42.0),
        (" 1.5 ", 1.5),
        ("abc", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ({"value": 1}, 0.0),
    ],
)
def test_coerce_metric_value(raw, expected) -> None:
    assert coerce_metric_value(raw) == expected
