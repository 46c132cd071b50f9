"""File I/O utilities for reading and writing pipeline data."""

import tomllib
from pathlib import Path

import pandas as pd
from rich.console import Console

type FilePath = str | Path

console = Console(stderr=True)

# Identifiers are opaque text; "007" and "7" are different campaigns
ID_COLUMNS = {"campaign_id": str, "user_id": str}


def read_table(path: FilePath) -> pd.DataFrame:
    """Read a single relation, picking the reader from the file suffix."""
    path = Path(path)

    match path.suffix.lower():
        case ".csv":
            # region codes like "NA" are values, not missing markers
            df = pd.read_csv(path, keep_default_na=False, na_values=[""], dtype=ID_COLUMNS)
        case ".parquet":
            df = pd.read_parquet(path)
        case ".json":
            df = pd.read_json(path, orient="records", dtype=ID_COLUMNS)
        case ext:
            raise ValueError(f"Unsupported input format: {ext or path.name}")

    return df


def find_table(directory: FilePath, stem: str) -> Path:
    """Locate ``<stem>.<ext>`` in a directory, preferring CSV."""
    directory = Path(directory)
    for ext in (".csv", ".parquet", ".json"):
        candidate = directory / f"{stem}{ext}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"No input file for '{stem}' in {directory}")


def write_output(df: pd.DataFrame, path: FilePath, fmt: str = "csv") -> Path:
    """Write a DataFrame to the specified format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    match fmt:
        case "csv":
            df.to_csv(path, index=False)
        case "parquet":
            df.to_parquet(path, index=False)
        case "excel":
            df.to_excel(path, index=False)
        case "json":
            df.to_json(path, orient="records", indent=2)
        case other:
            raise ValueError(f"Unsupported output format: {other}")

    console.print(f"  Wrote {len(df)} rows to {path}")
    return path


def output_suffix(fmt: str) -> str:
    match fmt:
        case "csv" | "parquet" | "json":
            return f".{fmt}"
        case "excel":
            return ".xlsx"
        case other:
            raise ValueError(f"Unsupported output format: {other}")


def load_toml_config(path: FilePath) -> dict:
    """Load a TOML configuration file using Python 3.11+ stdlib."""
    with open(path, "rb") as f:
        return tomllib.load(f)
