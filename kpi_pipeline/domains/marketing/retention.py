"""Month+1 retention for acquisition cohorts."""

import logging

import pandas as pd

from kpi_pipeline.domains.marketing.transform import month_key, next_month_key
from kpi_pipeline.utils.transforms import merge_datasets
from kpi_pipeline.utils.types import GRAIN

logger = logging.getLogger(__name__)


def compute_m1_retention(
    acquisition_details: pd.DataFrame,
    conversions: pd.DataFrame,
) -> pd.DataFrame:
    """Count, per cohort, the users who order again in the next calendar month.

    Retention is binary per user: any conversion in month M+1 counts, on any
    campaign or channel. Cohorts with nobody retained produce no row.
    """
    # distinct (user, active month) pairs keep the join one row per match
    activity = (
        conversions[["user_id"]]
        .assign(retention_month=month_key(conversions["date"]))
        .drop_duplicates()
    )

    cohorts = acquisition_details[[*GRAIN, "user_id"]].assign(
        retention_month=next_month_key(acquisition_details["month"])
    )

    retained = merge_datasets(
        cohorts,
        activity,
        on=["user_id", "retention_month"],
        how="inner",
    )

    retention = (
        retained.groupby(GRAIN, as_index=False, sort=True)["user_id"]
        .nunique()
        .rename(columns={"user_id": "m1_retained_users"})
    )
    logger.info(
        "M+1 retention: %d retained users across %d cohorts",
        int(retention["m1_retained_users"].sum()),
        len(retention),
    )
    return retention
