"""Pandera schemas for validating marketing KPI pipeline data."""

from pandera.pandas import Column, Check, DataFrameSchema


def _non_empty_str(unique: bool = False) -> Column:
    return Column(str, Check.str_length(min_value=1), nullable=False, unique=unique)


def _non_negative(dtype) -> Column:
    return Column(dtype, Check.greater_than_or_equal_to(0), nullable=False)


# Raw campaign performance events, one row per campaign per day
CampaignEventSchema = DataFrameSchema(
    columns={
        "date": Column("datetime64[ns]", nullable=False),
        "region": _non_empty_str(),
        "country": _non_empty_str(),
        "campaign_id": _non_empty_str(),
        "spend": _non_negative(float),
        "clicks": _non_negative(int),
        "installs": _non_negative(int),
    },
    strict=False,
    coerce=True,
)

# One row per order event; users may convert many times
ConversionSchema = DataFrameSchema(
    columns={
        "user_id": _non_empty_str(),
        "date": Column("datetime64[ns]", nullable=False),
        "campaign_id": _non_empty_str(),
    },
    strict=False,
    coerce=True,
)

CampaignMetadataSchema = DataFrameSchema(
    columns={
        "campaign_id": _non_empty_str(unique=True),
        "channel": _non_empty_str(),
    },
    strict=False,
    coerce=True,
)

# Static LTV lookup, keyed by month-of-year + market + channel
LtvProjectionSchema = DataFrameSchema(
    columns={
        "month_number": Column(int, Check.in_range(1, 12), nullable=False),
        "country": _non_empty_str(),
        "channel": _non_empty_str(),
        "average_ltv_per_customer": _non_negative(float),
    },
    unique=["month_number", "country", "channel"],
    strict=False,
    coerce=True,
)

# Final output, one row per (month, region, country, channel)
KpiSchema = DataFrameSchema(
    columns={
        "month": Column(str, Check.str_matches(r"^\d{4}-\d{2}$"), nullable=False),
        "region": _non_empty_str(),
        "country": _non_empty_str(),
        "channel": _non_empty_str(),
        "spend": _non_negative(float),
        "clicks": _non_negative(int),
        "installs": _non_negative(int),
        "conversions": _non_negative(int),
        "cac": Column(float, Check.greater_than_or_equal_to(0), nullable=True),
        "average_ltv_per_customer": _non_negative(float),
        "ltv_cac": Column(float, Check.greater_than_or_equal_to(0), nullable=True),
        "m1_retention": _non_negative(int),
    },
    checks=[
        Check(
            lambda df: df["cac"].isna().eq(df["conversions"].eq(0)).all(),
            error="cac must be null exactly when conversions is zero",
        ),
        Check(
            lambda df: df.loc[df["conversions"].eq(0), "ltv_cac"].isna().all(),
            error="ltv_cac must be null when conversions is zero",
        ),
    ],
    unique=["month", "region", "country", "channel"],
    ordered=True,
    strict=True,
    coerce=True,
)

INPUT_SCHEMAS = {
    "campaign_performance": CampaignEventSchema,
    "conversions": ConversionSchema,
    "campaign_metadata": CampaignMetadataSchema,
    "ltv_projections": LtvProjectionSchema,
}
