"""Normalize raw marketing relations and derive calendar-month keys."""

import pandas as pd

from kpi_pipeline.utils.transforms import normalize_columns

# Column aliases seen in exports from the cleaning stage
COLUMN_ALIASES = {
    "ltv_projections": {"month": "month_number"},
}

DATE_COLUMNS = {
    "campaign_performance": ["date"],
    "conversions": ["date"],
}

MONTH_FORMAT = "%Y-%m"


def parse_dates(df: pd.DataFrame, columns: list[str], relation: str) -> pd.DataFrame:
    """Parse date columns, rejecting the batch on any unparseable value."""
    df = df.copy()
    for col in columns:
        if col not in df.columns:
            continue
        parsed = pd.to_datetime(df[col], errors="coerce", format="ISO8601")
        bad = parsed.isna() & df[col].notna()
        if bad.any():
            sample = df.loc[bad, col].astype(str).head(5).tolist()
            raise ValueError(
                f"{relation}.{col} has {int(bad.sum())} malformed date values: {sample}"
            )
        df[col] = parsed
    return df


def normalize_relation(raw_df: pd.DataFrame, relation: str) -> pd.DataFrame:
    """Apply column normalization and date parsing for one input relation."""
    df = normalize_columns(raw_df, COLUMN_ALIASES.get(relation))
    return parse_dates(df, DATE_COLUMNS.get(relation, []), relation)


def month_key(dates: pd.Series) -> pd.Series:
    """Canonical ``YYYY-MM`` key used by every downstream join."""
    return dates.dt.strftime(MONTH_FORMAT)


def month_start(dates: pd.Series) -> pd.Series:
    return dates.dt.to_period("M").dt.to_timestamp()


def next_month_key(months: pd.Series) -> pd.Series:
    """Shift ``YYYY-MM`` keys forward one calendar month (Dec rolls into Jan)."""
    periods = pd.to_datetime(months, format=MONTH_FORMAT).dt.to_period("M") + 1
    return periods.dt.strftime(MONTH_FORMAT)


def month_number(months: pd.Series) -> pd.Series:
    """Numeric month-of-year (1-12) from a ``YYYY-MM`` key."""
    return months.str.slice(5, 7).astype(int)
