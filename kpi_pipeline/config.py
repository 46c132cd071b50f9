"""Pipeline configuration and environment setup."""

from dataclasses import dataclass, replace
from pathlib import Path

import yaml

from kpi_pipeline.utils.io import load_toml_config, output_suffix
from kpi_pipeline.utils.types import TieBreak, parse_tie_break

type ConfigDict = dict[str, str | int | bool | list[str]]

PROJECT_ROOT = Path(__file__).parent.parent

# Stem of each input relation inside the source directory
INPUT_TABLES = {
    "campaign_performance": "campaign_performance",
    "conversions": "conversions",
    "campaign_metadata": "campaign_metadata",
    "ltv_projections": "ltv_projections",
}


@dataclass(frozen=True)
class SourceConfig:
    data_dir: Path
    tables: dict[str, str]


@dataclass(frozen=True)
class OutputConfig:
    output_dir: Path
    filename: str
    fmt: str


@dataclass(frozen=True)
class PipelineConfig:
    env: str
    source: SourceConfig
    output: OutputConfig
    tie_break: TieBreak


def load_pipeline_config(env: str = "development") -> PipelineConfig:
    match env:
        case "production":
            source = SourceConfig(data_dir=Path("/data/marketing/clean"), tables=dict(INPUT_TABLES))
            output = OutputConfig(output_dir=Path("/data/marketing/kpis"), filename="kpi_table", fmt="parquet")
        case "staging":
            source = SourceConfig(data_dir=Path("/data/staging/marketing/clean"), tables=dict(INPUT_TABLES))
            output = OutputConfig(output_dir=Path("/data/staging/marketing/kpis"), filename="kpi_table", fmt="csv")
        case "development":
            source = SourceConfig(data_dir=PROJECT_ROOT / "data", tables=dict(INPUT_TABLES))
            output = OutputConfig(output_dir=PROJECT_ROOT / "output", filename="kpi_table", fmt="csv")
        case other:
            raise ValueError(f"Unknown environment: {other}")

    config = PipelineConfig(env=env, source=source, output=output, tie_break=TieBreak.FAN_OUT)
    return apply_overrides(config, get_env_config().get(env, {}))


def apply_overrides(config: PipelineConfig, overrides: ConfigDict) -> PipelineConfig:
    """Layer ``[tool.kpi_pipeline]`` style overrides onto a base config."""
    source, output, tie_break = config.source, config.output, config.tie_break

    for key, value in overrides.items():
        match key:
            case "data_dir":
                source = replace(source, data_dir=Path(str(value)))
            case "output_dir":
                output = replace(output, output_dir=Path(str(value)))
            case "output_filename":
                output = replace(output, filename=str(value))
            case "output_format":
                # fail on an unknown format before the batch runs
                output_suffix(str(value))
                output = replace(output, fmt=str(value))
            case "tie_break":
                tie_break = parse_tie_break(str(value))
            case unknown:
                raise ValueError(f"Unknown pipeline setting: {unknown}")

    return replace(config, source=source, output=output, tie_break=tie_break)


def get_env_config(root: Path = PROJECT_ROOT) -> dict[str, ConfigDict]:
    """Read per-environment overrides from pipeline.yaml or pyproject.toml."""
    config_path = root / "pipeline.yaml"
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}

    # Fall back to pyproject.toml metadata
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return {}
    data = load_toml_config(pyproject)
    return data.get("tool", {}).get("kpi_pipeline", {})
