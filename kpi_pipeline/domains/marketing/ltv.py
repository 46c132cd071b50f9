"""Attach projected lifetime value to the spend rollup."""

import logging

import pandas as pd

from kpi_pipeline.domains.marketing.transform import month_number
from kpi_pipeline.utils.transforms import merge_datasets
from kpi_pipeline.utils.validators import validate_unique

logger = logging.getLogger(__name__)

LTV_KEY = ["month_number", "country", "channel"]
DEFAULT_LTV = 0.0


def join_ltv_projections(agg_campaigns: pd.DataFrame, ltv_projections: pd.DataFrame) -> pd.DataFrame:
    """Left-join LTV projections on (month-of-year, country, channel).

    Every spend row survives; missing projections default to zero. A
    duplicated projection key rejects the batch rather than picking one.
    """
    result = validate_unique(ltv_projections, LTV_KEY)
    if not result["valid"]:
        raise ValueError(f"LTV projections are not unique: {'; '.join(result['errors'])}")

    keyed = agg_campaigns.assign(month_number=month_number(agg_campaigns["month"]))
    joined = merge_datasets(
        keyed,
        ltv_projections[[*LTV_KEY, "average_ltv_per_customer"]],
        on=LTV_KEY,
        how="left",
        validate="many_to_one",
    )

    missing = int(joined["average_ltv_per_customer"].isna().sum())
    if missing:
        logger.info("No LTV projection for %d grain cells, defaulting to %.1f", missing, DEFAULT_LTV)

    joined["average_ltv_per_customer"] = (
        joined["average_ltv_per_customer"].fillna(DEFAULT_LTV).astype(float)
    )
    return joined.drop(columns=["month_number"])
