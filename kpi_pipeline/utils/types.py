"""Shared type definitions for the pipeline."""

from enum import StrEnum

import pandas as pd


type StageOutputs = dict[str, pd.DataFrame]
type ValidationOutcome = dict[str, bool | str | list[str]]
type ColumnList = list[str]

# Dimension columns that uniquely key every KPI row
GRAIN: ColumnList = ["month", "region", "country", "channel"]


class PipelineStatus(StrEnum):
    OK = "ok"
    ERROR = "error"


class TieBreak(StrEnum):
    """How to attribute a first order that ties across several campaigns."""

    FAN_OUT = "fan_out"
    LOWEST_CAMPAIGN_ID = "lowest_campaign_id"


def parse_tie_break(value: str | TieBreak) -> TieBreak:
    match value:
        case TieBreak():
            return value
        case "fan_out" | "fan-out":
            return TieBreak.FAN_OUT
        case "lowest_campaign_id" | "lowest-campaign-id":
            return TieBreak.LOWEST_CAMPAIGN_ID
        case other:
            raise ValueError(f"Unknown tie-break policy: {other}")
