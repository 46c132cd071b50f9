"""Unit tests for M+1 retention."""
import pandas as pd

from conftest import make_conversions
from kpi_pipeline.domains.marketing.retention import compute_m1_retention


def _details(rows):
    """rows: (month, region, country, channel, user_id, first_order_date)."""
    df = pd.DataFrame(
        rows,
        columns=["month", "region", "country", "channel", "user_id", "first_order_date"],
    )
    df["first_order_date"] = pd.to_datetime(df["first_order_date"])
    return df


def test_december_cohort_retains_into_january_of_next_year():
    details = _details([("2023-12", "NA", "US", "search", "u1", "2023-12-15")])
    conversions = make_conversions([
        ("u1", "2023-12-15", "C1"),
        ("u1", "2024-01-02", "C1"),
    ])

    retention = compute_m1_retention(details, conversions)

    assert retention.to_dict("records") == [
        {"month": "2023-12", "region": "NA", "country": "US", "channel": "search", "m1_retained_users": 1},
    ]


def test_same_month_or_later_orders_do_not_count():
    details = _details([("2023-12", "NA", "US", "search", "u1", "2023-12-15")])
    conversions = make_conversions([
        ("u1", "2023-12-15", "C1"),
        ("u1", "2023-12-28", "C1"),
        ("u1", "2024-02-01", "C1"),
        ("u1", "2022-12-01", "C1"),
    ])

    assert compute_m1_retention(details, conversions).empty


def test_retention_is_binary_per_user_and_ignores_channel():
    details = _details([
        ("2024-01", "NA", "US", "search", "u1", "2024-01-10"),
        ("2024-01", "NA", "US", "search", "u2", "2024-01-11"),
        ("2024-01", "NA", "US", "search", "u3", "2024-01-12"),
    ])
    conversions = make_conversions([
        ("u1", "2024-02-01", "C1"),
        ("u1", "2024-02-03", "C1"),
        ("u1", "2024-02-09", "C7"),
        ("u2", "2024-02-29", "C9"),
    ])

    retention = compute_m1_retention(details, conversions)

    assert retention["m1_retained_users"].tolist() == [2]
