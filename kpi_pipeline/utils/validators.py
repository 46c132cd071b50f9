"""Data validation utilities using pandera."""

import pandas as pd
from pandera.errors import SchemaErrors
from pandera.pandas import DataFrameSchema

from kpi_pipeline.utils.types import PipelineStatus, ValidationOutcome


def validate_dataframe(df: pd.DataFrame, schema: DataFrameSchema) -> ValidationOutcome:
    """Validate a DataFrame against a pandera schema, collecting every failure."""
    try:
        schema.validate(df, lazy=True)
        return {"valid": True, "status": PipelineStatus.OK, "errors": []}
    except SchemaErrors as e:
        errors = []
        for _, row in e.failure_cases.iterrows():
            match row.to_dict():
                case {"column": col, "check": check, "failure_case": val}:
                    errors.append(f"Column '{col}' failed check '{check}': {val}")
                case failure:
                    errors.append(f"Validation failure: {failure}")
        return {"valid": False, "status": PipelineStatus.ERROR, "errors": errors}


def validate_unique(df: pd.DataFrame, columns: list[str]) -> ValidationOutcome:
    """Check that specified columns form a unique key."""
    duplicates = df.duplicated(subset=columns, keep=False)
    dup_count = int(duplicates.sum())

    match dup_count:
        case 0:
            return {"valid": True, "status": PipelineStatus.OK, "errors": []}
        case n:
            sample = df.loc[duplicates, columns].drop_duplicates().head(5).to_dict("records")
            return {
                "valid": False,
                "status": PipelineStatus.ERROR,
                "errors": [f"Found {n} duplicate rows on columns {columns}. Sample: {sample}"],
            }


def validate_referential_integrity(
    child: pd.DataFrame,
    parent: pd.DataFrame,
    child_key: str,
    parent_key: str,
) -> ValidationOutcome:
    """Validate that all child keys exist in parent."""
    orphans = set(child[child_key].unique()) - set(parent[parent_key].unique())

    match len(orphans):
        case 0:
            return {"valid": True, "status": PipelineStatus.OK, "errors": []}
        case n:
            sample = sorted(map(str, orphans))[:5]
            return {
                "valid": False,
                "status": PipelineStatus.ERROR,
                "errors": [f"Found {n} orphan keys. Sample: {sample}"],
            }
