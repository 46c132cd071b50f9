"""Campaign activity rollups: monthly per-campaign and per-grain spend."""

import logging

import pandas as pd

from kpi_pipeline.domains.marketing.transform import month_key, month_start
from kpi_pipeline.utils.transforms import merge_datasets, require_columns
from kpi_pipeline.utils.types import GRAIN

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ["spend", "clicks", "installs"]
CAMPAIGN_BASE_KEYS = ["month_start", "month", "region", "country", "campaign_id"]


def aggregate_monthly_campaigns(events: pd.DataFrame) -> pd.DataFrame:
    """Roll raw campaign events up to one row per campaign per calendar month.

    Establishes the ``YYYY-MM`` month key every later join relies on.
    """
    require_columns(events, {"date", "region", "country", "campaign_id", *METRIC_COLUMNS}, "campaign_performance")

    df = events.assign(
        month_start=month_start(events["date"]),
        month=month_key(events["date"]),
    )
    campaign_base = (
        df.groupby(CAMPAIGN_BASE_KEYS, as_index=False, sort=True)[METRIC_COLUMNS]
        .sum()
        .reset_index(drop=True)
    )

    logger.info(
        "Campaign base: %d events -> %d campaign-months",
        len(events),
        len(campaign_base),
    )
    return campaign_base


def aggregate_spend(campaign_base: pd.DataFrame, metadata: pd.DataFrame) -> pd.DataFrame:
    """Sum spend, clicks and installs per (month, region, country, channel).

    Covers all spend in the period, whether or not it produced a counted
    acquisition. Campaigns without a metadata row have no channel and drop out.
    """
    with_channel = merge_datasets(
        campaign_base,
        metadata[["campaign_id", "channel"]],
        on="campaign_id",
        how="inner",
        validate="many_to_one",
    )

    dropped = len(campaign_base) - len(with_channel)
    if dropped:
        logger.warning("Spend rollup: %d campaign-months had no channel metadata", dropped)

    return with_channel.groupby(GRAIN, as_index=False, sort=True)[METRIC_COLUMNS].sum()
