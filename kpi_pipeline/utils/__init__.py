"""Shared utilities for the data pipeline."""

from kpi_pipeline.utils.io import read_table, find_table, write_output
from kpi_pipeline.utils.transforms import normalize_columns, merge_datasets, require_columns
from kpi_pipeline.utils.validators import validate_dataframe, validate_unique
from kpi_pipeline.utils.types import GRAIN, PipelineStatus, StageOutputs, TieBreak
