"""Marketing domain: first-order attribution, acquisition and KPI reporting."""

import logging

from kpi_pipeline.config import PipelineConfig
from kpi_pipeline.domains.marketing.ingest import conform_inputs, ingest_marketing_data, load_marketing_data
from kpi_pipeline.domains.marketing.campaigns import aggregate_monthly_campaigns, aggregate_spend
from kpi_pipeline.domains.marketing.attribution import resolve_first_orders, link_first_orders
from kpi_pipeline.domains.marketing.acquisition import enrich_acquisitions, aggregate_conversions
from kpi_pipeline.domains.marketing.retention import compute_m1_retention
from kpi_pipeline.domains.marketing.ltv import join_ltv_projections
from kpi_pipeline.domains.marketing.kpis import compose_kpis, KPI_COLUMNS
from kpi_pipeline.domains.marketing.models import INPUT_SCHEMAS, KpiSchema
from kpi_pipeline.utils.io import output_suffix, write_output
from kpi_pipeline.utils.types import PipelineStatus, StageOutputs, TieBreak
from kpi_pipeline.utils.validators import validate_dataframe

logger = logging.getLogger(__name__)


def build_kpi_table(tables: StageOutputs, tie_break: TieBreak = TieBreak.FAN_OUT) -> StageOutputs:
    """Run every stage over conformed input relations.

    Returns each intermediate relation keyed by stage name; the final
    table is under ``"kpis"``.
    """
    events = tables["campaign_performance"]
    conversions = tables["conversions"]
    metadata = tables["campaign_metadata"]
    ltv_projections = tables["ltv_projections"]

    campaign_base = aggregate_monthly_campaigns(events)
    first_orders = resolve_first_orders(conversions)
    acquired_users = link_first_orders(first_orders, conversions, tie_break=tie_break)
    acquisition_details = enrich_acquisitions(acquired_users, campaign_base, metadata)
    retention_m1 = compute_m1_retention(acquisition_details, conversions)
    agg_conversions = aggregate_conversions(acquisition_details)
    agg_campaigns = aggregate_spend(campaign_base, metadata)
    ltv_joined = join_ltv_projections(agg_campaigns, ltv_projections)
    kpis = compose_kpis(ltv_joined, agg_conversions, retention_m1)

    return {
        "campaign_base": campaign_base,
        "first_orders": first_orders,
        "acquired_users": acquired_users,
        "acquisition_details": acquisition_details,
        "retention_m1": retention_m1,
        "agg_conversions": agg_conversions,
        "agg_campaigns": agg_campaigns,
        "ltv_joined": ltv_joined,
        "kpis": kpis,
    }


def compute_kpis(tables: StageOutputs, tie_break: TieBreak = TieBreak.FAN_OUT) -> StageOutputs:
    """Conform raw relations, run the stages and check the output contract."""
    conformed = conform_inputs(tables)
    stages = build_kpi_table(conformed, tie_break=tie_break)
    stages["kpis"] = KpiSchema.validate(stages["kpis"], lazy=True)
    return stages


def validate(config: PipelineConfig) -> dict:
    """Check that the input relations load and satisfy their schemas."""
    try:
        tables = load_marketing_data(config.source.data_dir, config.source.tables)
    except (FileNotFoundError, ValueError) as exc:
        return {"status": PipelineStatus.ERROR, "message": str(exc)}

    errors = []
    for name, schema in INPUT_SCHEMAS.items():
        match validate_dataframe(tables[name], schema):
            case {"valid": True}:
                continue
            case {"valid": False, "errors": errs}:
                errors.extend(f"{name}: {err}" for err in errs)

    match errors:
        case []:
            return {
                "status": PipelineStatus.OK,
                "row_counts": {name: len(df) for name, df in tables.items()},
            }
        case _:
            return {"status": PipelineStatus.ERROR, "message": "; ".join(errors[:3])}


def run(config: PipelineConfig) -> StageOutputs:
    """Execute the full KPI pipeline and write the output relation."""
    tables = ingest_marketing_data(config.source.data_dir, config.source.tables)
    stages = build_kpi_table(tables, tie_break=config.tie_break)
    stages["kpis"] = KpiSchema.validate(stages["kpis"], lazy=True)

    output = config.output
    path = output.output_dir / f"{output.filename}{output_suffix(output.fmt)}"
    write_output(stages["kpis"], path, fmt=output.fmt)
    logger.info("KPI pipeline finished: %d rows written to %s", len(stages["kpis"]), path)
    return stages
