"""Unit tests for the KPI composer."""
import math

import pandas as pd

from kpi_pipeline.domains.marketing.kpis import KPI_COLUMNS, compose_kpis

GRAIN = ["month", "region", "country", "channel"]


def _ltv_joined(rows):
    """rows: (month, region, country, channel, spend, ltv)."""
    df = pd.DataFrame(rows, columns=[*GRAIN, "spend", "average_ltv_per_customer"])
    df["clicks"] = 1
    df["installs"] = 1
    return df


def _counts(rows, column):
    return pd.DataFrame(rows, columns=[*GRAIN, column])


def test_compose_kpis_computes_cac_and_ltv_cac():
    ltv_joined = _ltv_joined([("2024-01", "NA", "US", "search", 100.0, 250.0)])
    conversions = _counts([("2024-01", "NA", "US", "search", 3)], "conversions")
    retention = _counts([("2024-01", "NA", "US", "search", 1)], "m1_retained_users")

    row = compose_kpis(ltv_joined, conversions, retention).iloc[0]

    assert row["conversions"] == 3
    assert row["cac"] == 33.33
    # divisor is the unrounded cac (100 / 3)
    assert row["ltv_cac"] == 7.5
    assert row["m1_retention"] == 1


def test_compose_kpis_null_safety_and_defaults():
    ltv_joined = _ltv_joined([
        ("2024-01", "NA", "US", "search", 100.0, 250.0),
        ("2024-01", "NA", "US", "social", 0.0, 90.0),
    ])
    conversions = _counts([("2024-01", "NA", "US", "social", 2)], "conversions")
    retention = _counts([], "m1_retained_users")

    kpis = compose_kpis(ltv_joined, conversions, retention)
    search, social = kpis.iloc[0], kpis.iloc[1]

    assert search["conversions"] == 0
    assert math.isnan(search["cac"])
    assert math.isnan(search["ltv_cac"])
    assert social["cac"] == 0.0
    assert math.isnan(social["ltv_cac"])
    assert kpis["m1_retention"].tolist() == [0, 0]


def test_compose_kpis_column_order_and_sorting():
    ltv_joined = _ltv_joined([
        ("2024-02", "NA", "US", "search", 1.0, 0.0),
        ("2024-01", "NA", "US", "social", 1.0, 0.0),
        ("2024-01", "EU", "GB", "search", 1.0, 0.0),
        ("2024-01", "NA", "CA", "search", 1.0, 0.0),
    ])

    kpis = compose_kpis(ltv_joined, _counts([], "conversions"), _counts([], "m1_retained_users"))

    assert list(kpis.columns) == KPI_COLUMNS
    assert kpis[GRAIN].values.tolist() == [
        ["2024-01", "EU", "GB", "search"],
        ["2024-01", "NA", "CA", "search"],
        ["2024-01", "NA", "US", "social"],
        ["2024-02", "NA", "US", "search"],
    ]
