from datetime import date

from neon_usage.analytics import DailyUsage, build_usage_df, compute_usage_kpis
from neon_usage.ui import format_kpi_values


def test_format_kpi_values_keeps_fractional_peak_branches() -> None:
    kpis = compute_usage_kpis(
        build_usage_df(
            [
                DailyUsage(date=date(2026, 2, 1), extra_branches=0.0333),
                DailyUsage(date=date(2026, 2, 2), extra_branches=0.0125),
            ]
        )
    )

    assert format_kpi_values(kpis)["Peak Extra Branches"] == "0.0333"


def test_format_kpi_values_whole_numbers() -> None:
    values = format_kpi_values(
        {
            "total_compute_hours": 2.5,
            "avg_storage_gib": 1.0,
            "total_transfer_gib": 0.25,
            "peak_extra_branches": 5.0,
        }
    )

    assert values == {
        "Total Compute": "2.5 hrs",
        "Avg Storage": "1.00 GiB",
        "Data Transfer": "0.25 GiB",
        "Peak Extra Branches": "5",
    }
