"""Unit tests for relation normalization and month-key helpers."""
import pandas as pd
import pytest

from kpi_pipeline.domains.marketing.transform import (
    month_key,
    month_number,
    month_start,
    next_month_key,
    normalize_relation,
    parse_dates,
)


def test_month_key_and_start():
    dates = pd.Series(pd.to_datetime(["2024-03-31", "2023-12-01"]))

    assert month_key(dates).tolist() == ["2024-03", "2023-12"]
    assert month_start(dates).tolist() == [pd.Timestamp("2024-03-01"), pd.Timestamp("2023-12-01")]


def test_next_month_key_rolls_over_year_boundary():
    months = pd.Series(["2023-12", "2024-01", "2024-11"])

    assert next_month_key(months).tolist() == ["2024-01", "2024-02", "2024-12"]


def test_month_number_extracts_month_of_year():
    assert month_number(pd.Series(["2024-01", "2023-12"])).tolist() == [1, 12]


def test_parse_dates_rejects_malformed_values():
    df = pd.DataFrame({"date": ["2024-01-05", "2024-13-45", "not a date"]})

    with pytest.raises(ValueError, match="conversions.date has 2 malformed date values"):
        parse_dates(df, ["date"], "conversions")


def test_normalize_relation_renames_ltv_month_column():
    raw = pd.DataFrame({
        "Month": [1],
        "Country": ["US"],
        "Channel": ["search"],
        "Average LTV Per Customer": [10.0],
    })

    df = normalize_relation(raw, "ltv_projections")

    assert list(df.columns) == ["month_number", "country", "channel", "average_ltv_per_customer"]
