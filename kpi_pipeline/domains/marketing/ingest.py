"""Ingest the cleaned marketing relations produced by the preparation stage."""

import logging
from pathlib import Path

import pandas as pd

from kpi_pipeline.domains.marketing.models import INPUT_SCHEMAS
from kpi_pipeline.domains.marketing.transform import normalize_relation
from kpi_pipeline.utils.io import find_table, read_table
from kpi_pipeline.utils.validators import validate_referential_integrity

logger = logging.getLogger(__name__)

type InputTables = dict[str, pd.DataFrame]


def _read_relation(relation: str, stem: str, data_dir: Path) -> pd.DataFrame:
    path = find_table(data_dir, stem)
    logger.debug("Reading %s from %s", relation, path)
    return read_table(path)


def conform_inputs(tables: InputTables) -> InputTables:
    """Normalize and schema-check already-loaded relations.

    Raises ``pandera.errors.SchemaErrors`` listing every failure when any
    relation breaks its contract, so a bad batch never reaches the stages.
    """
    missing = set(INPUT_SCHEMAS) - set(tables)
    if missing:
        raise ValueError(f"Missing input relations: {sorted(missing)}")

    conformed = {}
    for relation, schema in INPUT_SCHEMAS.items():
        df = normalize_relation(tables[relation], relation)
        conformed[relation] = schema.validate(df, lazy=True)

    _warn_on_orphans(conformed)
    return conformed


def _warn_on_orphans(tables: InputTables) -> None:
    metadata = tables["campaign_metadata"]
    for relation in ("campaign_performance", "conversions"):
        result = validate_referential_integrity(
            tables[relation], metadata, "campaign_id", "campaign_id"
        )
        if not result["valid"]:
            logger.warning(
                "%s references campaigns without metadata: %s",
                relation,
                "; ".join(result["errors"]),
            )


def load_marketing_data(data_dir: Path, tables: dict[str, str]) -> InputTables:
    """Read and normalize the input relations without schema checks.

    ``tables`` maps each relation name to its file stem; the file suffix
    picks the reader.
    """
    loaded = {}
    for relation, stem in tables.items():
        loaded[relation] = normalize_relation(_read_relation(relation, stem, data_dir), relation)
        logger.info("Loaded %d rows for %s", len(loaded[relation]), relation)
    return loaded


def ingest_marketing_data(data_dir: Path, tables: dict[str, str]) -> InputTables:
    """Load the four input relations from ``data_dir`` and conform them."""
    return conform_inputs(load_marketing_data(data_dir, tables))
