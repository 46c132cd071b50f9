"""Acquisition cohorts: enrich attributed first orders and count new customers."""

import logging

import pandas as pd

from kpi_pipeline.domains.marketing.transform import month_key
from kpi_pipeline.utils.transforms import merge_datasets
from kpi_pipeline.utils.types import GRAIN

logger = logging.getLogger(__name__)

ACQUISITION_COLUMNS = [*GRAIN, "user_id", "first_order_date"]


def enrich_acquisitions(
    acquired_users: pd.DataFrame,
    campaign_base: pd.DataFrame,
    metadata: pd.DataFrame,
) -> pd.DataFrame:
    """Tag each attributed first order with month, region, country and channel.

    Month-strict: the attributed campaign must have recorded activity in the
    same calendar month as the first order, otherwise the acquisition is
    dropped. A campaign active in several markets that month yields one row
    per market.
    """
    acquired = acquired_users.assign(month=month_key(acquired_users["first_order_date"]))

    with_market = merge_datasets(
        acquired,
        campaign_base[["campaign_id", "month", "region", "country"]],
        on=["campaign_id", "month"],
        how="inner",
    )
    details = merge_datasets(
        with_market,
        metadata[["campaign_id", "channel"]],
        on="campaign_id",
        how="inner",
        validate="many_to_one",
    )

    unmatched = set(acquired["user_id"]) - set(details["user_id"])
    if unmatched:
        logger.info(
            "Month-strict filter dropped %d of %d acquired users",
            len(unmatched),
            acquired["user_id"].nunique(),
        )

    return (
        details[ACQUISITION_COLUMNS]
        .sort_values([*GRAIN, "user_id"], kind="mergesort")
        .reset_index(drop=True)
    )


def aggregate_conversions(acquisition_details: pd.DataFrame) -> pd.DataFrame:
    """Count distinct newly acquired users per grain cell."""
    return (
        acquisition_details.groupby(GRAIN, as_index=False, sort=True)["user_id"]
        .nunique()
        .rename(columns={"user_id": "conversions"})
    )
