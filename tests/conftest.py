"""Shared fixtures for building small marketing relations."""
import pandas as pd
import pytest


def make_events(rows):
    """rows: (date, region, country, campaign_id, spend, clicks, installs)."""
    df = pd.DataFrame(
        rows,
        columns=["date", "region", "country", "campaign_id", "spend", "clicks", "installs"],
    )
    df["date"] = pd.to_datetime(df["date"])
    df["spend"] = df["spend"].astype(float)
    return df


def make_conversions(rows):
    """rows: (user_id, date, campaign_id)."""
    df = pd.DataFrame(rows, columns=["user_id", "date", "campaign_id"])
    df["date"] = pd.to_datetime(df["date"])
    return df


def make_metadata(mapping):
    return pd.DataFrame(
        sorted(mapping.items()), columns=["campaign_id", "channel"]
    )


def make_ltv(rows):
    """rows: (month_number, country, channel, average_ltv_per_customer)."""
    df = pd.DataFrame(
        rows,
        columns=["month_number", "country", "channel", "average_ltv_per_customer"],
    )
    df["month_number"] = df["month_number"].astype(int)
    df["average_ltv_per_customer"] = df["average_ltv_per_customer"].astype(float)
    return df


@pytest.fixture
def scenario_tables():
    """One US search user acquired in January who orders again in February."""
    return {
        "campaign_performance": make_events([
            ("2024-01-05", "NA", "US", "C", 60.0, 30, 3),
            ("2024-01-20", "NA", "US", "C", 40.0, 20, 2),
            ("2024-02-03", "EU", "GB", "D", 50.0, 10, 1),
        ]),
        "conversions": make_conversions([
            ("u1", "2024-01-21", "C"),
            ("u1", "2024-02-14", "C"),
        ]),
        "campaign_metadata": make_metadata({"C": "search", "D": "social"}),
        "ltv_projections": make_ltv([
            (1, "US", "search", 250.0),
            (2, "GB", "social", 80.0),
        ]),
    }
