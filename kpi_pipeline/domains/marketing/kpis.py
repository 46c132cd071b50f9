"""Compose the final KPI table: conversions, CAC, LTV:CAC and M+1 retention."""

import logging

import numpy as np
import pandas as pd

from kpi_pipeline.utils.transforms import merge_datasets
from kpi_pipeline.utils.types import GRAIN

logger = logging.getLogger(__name__)

KPI_COLUMNS = [
    *GRAIN,
    "spend",
    "clicks",
    "installs",
    "conversions",
    "cac",
    "average_ltv_per_customer",
    "ltv_cac",
    "m1_retention",
]


def _safe_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Element-wise division that yields NaN wherever the denominator is not positive."""
    valid = denominator > 0
    ratio = np.divide(
        numerator.to_numpy(dtype=float),
        denominator.to_numpy(dtype=float),
        out=np.full(len(numerator), np.nan),
        where=valid.to_numpy(),
    )
    return pd.Series(ratio, index=numerator.index)


def compose_kpis(
    ltv_joined: pd.DataFrame,
    agg_conversions: pd.DataFrame,
    retention_m1: pd.DataFrame,
) -> pd.DataFrame:
    """Assemble one KPI row per (month, region, country, channel) spend cell.

    ``cac`` is null when there were no conversions and ``ltv_cac`` is null
    whenever ``cac`` is null or zero. Missing conversion and retention matches
    count as zero.
    """
    kpis = merge_datasets(ltv_joined, agg_conversions, on=GRAIN, how="left", validate="one_to_one")
    kpis = merge_datasets(kpis, retention_m1, on=GRAIN, how="left", validate="one_to_one")

    kpis["conversions"] = kpis["conversions"].fillna(0).astype(int)
    kpis["m1_retention"] = kpis.pop("m1_retained_users").fillna(0).astype(int)

    raw_cac = _safe_ratio(kpis["spend"], kpis["conversions"])
    kpis["cac"] = raw_cac.round(2)
    kpis["ltv_cac"] = _safe_ratio(kpis["average_ltv_per_customer"], raw_cac).round(2)

    kpis = (
        kpis[KPI_COLUMNS]
        .sort_values(GRAIN, kind="mergesort")
        .reset_index(drop=True)
    )

    logger.info(
        "KPI table: %d rows, %d with conversions",
        len(kpis),
        int((kpis["conversions"] > 0).sum()),
    )
    return kpis
