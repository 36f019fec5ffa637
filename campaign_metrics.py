"""
PPC Metrics – campaign call sites: validation mode, aggregation and pacing per use case.

Inputs are raw GAQL responses ({"rows": [...]}) already fetched by the
caller. Detail and list views are strict (a bad response must not render
wrong numbers); the daily chart series and pacing are best effort.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from budget_deriver import BudgetPacing, daily_spend_series, derive_budget_pacing
from config import normalize_campaign_id
from errors import AggregationError, NotFound
from gaql_schemas import CAMPAIGN, CAMPAIGN_METADATA, CAMPAIGN_METRICS, DAILY_METRICS, CampaignMetadataRow
from metrics_aggregator import Rollup, aggregate_by_entity, aggregate_rows
from response_validator import parse_gaql_response, parse_gaql_response_safe

logger = logging.getLogger(__name__)


class CampaignDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: CampaignMetadataRow
    metrics: Rollup


class CampaignSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    campaign_id: str
    campaign_name: str
    status: str
    advertising_channel_type: str
    metrics: Rollup


def build_campaign_detail(campaign_id: object, metadata_response: Any, metrics_response: Any) -> CampaignDetail:
    """
    Campaign settings plus metrics summed over the metric rows (one row per day).

    Raises ValidationError on a malformed response, NotFound when the metadata
    query returned no campaign, AggregationError when metric rows belong to
    another campaign.
    """
    cid = normalize_campaign_id(campaign_id)
    context = f"getCampaignDetail({cid})"
    metadata_rows = parse_gaql_response(CAMPAIGN_METADATA, metadata_response, context)
    if not metadata_rows:
        raise NotFound(f"Campaign {cid} not found")
    meta = metadata_rows[0]
    metric_rows = parse_gaql_response(CAMPAIGN_METRICS, metrics_response, context)
    stray = [r.campaign_id for r in metric_rows if r.campaign_id != meta.campaign_id]
    if stray:
        raise AggregationError(f"{context}: metric rows for other campaigns: {', '.join(sorted(set(stray)))}")
    rollup = aggregate_rows(metric_rows)
    if not rollup.entity_id:
        rollup = rollup.model_copy(update={"entity_id": meta.campaign_id})
    logger.info("%s: %s metric rows aggregated (%s..%s)", context, rollup.row_count, rollup.first_date or "-", rollup.last_date or "-")
    return CampaignDetail(metadata=meta, metrics=rollup)


def build_daily_metrics(campaign_id: object, response: Any) -> List[Any]:
    """Daily rows for charts, oldest first; an unusable response yields []."""
    context = f"getDailyMetrics({normalize_campaign_id(campaign_id)})"
    rows = parse_gaql_response_safe(DAILY_METRICS, response, context, fallback=[])
    return sorted(rows, key=lambda r: r.date)


def build_campaign_list(response: Any) -> List[CampaignSummary]:
    """One summary per campaign from per-day campaign rows, in first-seen order."""
    rows = parse_gaql_response(CAMPAIGN, response, "getCampaigns")
    first_rows: Dict[str, Any] = {}
    for row in rows:
        first_rows.setdefault(row.campaign_id, row)
    rollups = aggregate_by_entity(rows)
    campaigns = [
        CampaignSummary(
            campaign_id=cid,
            campaign_name=first_rows[cid].campaign_name,
            status=first_rows[cid].status,
            advertising_channel_type=first_rows[cid].advertising_channel_type,
            metrics=rollup,
        )
        for cid, rollup in rollups.items()
    ]
    logger.info("build_campaign_list: %s campaigns from %s rows", len(campaigns), len(rows))
    return campaigns


def build_budget_pacing(
    campaign_id: object,
    response: Any,
    daily_budget_micros: int,
    window_days: Optional[int] = None,
) -> BudgetPacing:
    """Pacing from the daily series; a bad series response degrades to zero spend."""
    rows = build_daily_metrics(campaign_id, response)
    return derive_budget_pacing(daily_spend_series(rows), daily_budget_micros, window_days=window_days)
