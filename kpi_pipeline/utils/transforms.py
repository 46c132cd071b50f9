"""Common data transformation utilities."""

import pandas as pd

type ColumnMapping = dict[str, str]


def normalize_columns(df: pd.DataFrame, mapping: ColumnMapping | None = None) -> pd.DataFrame:
    """Normalize column names to snake_case and apply optional mapping."""
    df = df.copy()
    df.columns = [str(col).strip().lower().replace(" ", "_").replace("-", "_") for col in df.columns]

    if mapping:
        df = df.rename(columns=mapping)

    return df


def merge_datasets(
    left: pd.DataFrame,
    right: pd.DataFrame,
    on: str | list[str] | None = None,
    how: str = "left",
    left_on: str | list[str] | None = None,
    right_on: str | list[str] | None = None,
    validate: str | None = None,
) -> pd.DataFrame:
    """Hash-join two relations.

    ``validate`` is passed through to pandas so that a lookup table with a
    duplicated key fails the merge instead of silently fanning out rows.
    """
    match how:
        case "left" | "inner":
            result = pd.merge(
                left,
                right,
                on=on,
                how=how,
                left_on=left_on,
                right_on=right_on,
                validate=validate,
                sort=False,
            )
        case other:
            raise ValueError(f"Unsupported merge type: {other}")

    return result


def require_columns(df: pd.DataFrame, required: set[str], relation: str) -> None:
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"{relation} is missing required columns: {sorted(missing)}")
