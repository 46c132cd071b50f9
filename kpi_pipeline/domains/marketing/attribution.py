"""First-order attribution: resolve each user's first conversion and its campaign.

The model is first-order, single-touch: only the campaign on a user's literal
first conversion is credited, and later conversions are never attributed.
When a user's earliest date carries conversions from several campaigns, each
of those rows is kept (fan-out) unless a deterministic tie-break is requested.
"""

import logging

import pandas as pd

from kpi_pipeline.utils.transforms import merge_datasets, require_columns
from kpi_pipeline.utils.types import TieBreak

logger = logging.getLogger(__name__)


def resolve_first_orders(conversions: pd.DataFrame) -> pd.DataFrame:
    """One row per user holding the earliest conversion date."""
    require_columns(conversions, {"user_id", "date"}, "conversions")

    first_orders = (
        conversions.groupby("user_id", as_index=False, sort=True)["date"]
        .min()
        .rename(columns={"date": "first_order_date"})
    )
    logger.info("First orders resolved for %d users", len(first_orders))
    return first_orders


def _break_ties(acquired: pd.DataFrame) -> pd.DataFrame:
    return (
        acquired.sort_values(["user_id", "campaign_id"], kind="mergesort")
        .drop_duplicates(subset=["user_id"], keep="first")
        .reset_index(drop=True)
    )


def link_first_orders(
    first_orders: pd.DataFrame,
    conversions: pd.DataFrame,
    tie_break: TieBreak = TieBreak.FAN_OUT,
) -> pd.DataFrame:
    """Recover the campaign behind each user's first order.

    Joins back to the conversions on (user_id, date == first_order_date).
    """
    require_columns(conversions, {"user_id", "date", "campaign_id"}, "conversions")

    acquired = merge_datasets(
        first_orders,
        conversions[["user_id", "date", "campaign_id"]],
        left_on=["user_id", "first_order_date"],
        right_on=["user_id", "date"],
        how="inner",
    )[["user_id", "first_order_date", "campaign_id"]]

    tied_users = int(acquired["user_id"].duplicated().sum())
    match tie_break:
        case TieBreak.FAN_OUT:
            if tied_users:
                logger.warning(
                    "%d extra attribution rows from first orders tied across campaigns (fan-out kept)",
                    tied_users,
                )
        case TieBreak.LOWEST_CAMPAIGN_ID:
            acquired = _break_ties(acquired)
            if tied_users:
                logger.info("Resolved %d tied attribution rows to the lowest campaign_id", tied_users)
        case other:
            raise ValueError(f"Unsupported tie-break policy: {other}")

    return acquired.sort_values(["user_id", "campaign_id"], kind="mergesort").reset_index(drop=True)
