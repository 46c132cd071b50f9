"""Unit tests for the LTV projection join."""
import pandas as pd
import pytest

from conftest import make_ltv
from kpi_pipeline.domains.marketing.ltv import join_ltv_projections


@pytest.fixture
def agg_campaigns():
    return pd.DataFrame({
        "month": ["2023-12", "2024-01", "2024-01"],
        "region": ["NA", "NA", "EU"],
        "country": ["US", "US", "GB"],
        "channel": ["search", "search", "social"],
        "spend": [10.0, 20.0, 30.0],
        "clicks": [1, 2, 3],
        "installs": [0, 1, 1],
    })


def test_join_ltv_matches_month_of_year(agg_campaigns):
    ltv = make_ltv([
        (12, "US", "search", 55.0),
        (1, "US", "search", 40.0),
        (1, "GB", "search", 99.0),
    ])

    joined = join_ltv_projections(agg_campaigns, ltv)

    assert joined["average_ltv_per_customer"].tolist() == [55.0, 40.0, 0.0]
    assert list(joined.columns) == [*agg_campaigns.columns, "average_ltv_per_customer"]


def test_join_ltv_keeps_every_spend_row_without_projections(agg_campaigns):
    ltv = make_ltv([(6, "FR", "email", 12.0)])

    joined = join_ltv_projections(agg_campaigns, ltv)

    assert len(joined) == len(agg_campaigns)
    assert (joined["average_ltv_per_customer"] == 0.0).all()


def test_join_ltv_rejects_duplicate_projection_keys(agg_campaigns):
    ltv = make_ltv([
        (1, "US", "search", 40.0),
        (1, "US", "search", 45.0),
    ])

    with pytest.raises(ValueError, match="not unique"):
        join_ltv_projections(agg_campaigns, ltv)
