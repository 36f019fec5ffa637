"""
PPC Metrics – FastAPI facade over the validation / aggregation layer.

Clients post raw GAQL responses they already fetched; the server returns
typed rows and rollups. Nothing here talks to Google Ads.

  uvicorn server:app --host 0.0.0.0 --port 9001
"""

import logging
from datetime import date
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from campaign_metrics import build_budget_pacing, build_campaign_detail, build_campaign_list, build_daily_metrics
from config import DEFAULT_METRICS_DAYS, LOG_FORMAT, LOG_LEVEL
from errors import AggregationError, InvalidArgument, NotFound, ValidationError
from query_builder import build_date_filter

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="PPC Metrics",
    description="Validates GAQL query responses and rolls daily metrics up into campaign figures.",
)


class CampaignDetailRequest(BaseModel):
    metadata: Any = None
    metrics: Any = None


class GaqlResponseRequest(BaseModel):
    response: Any = None


class BudgetPacingRequest(BaseModel):
    response: Any = None
    daily_budget_micros: int
    window_days: Optional[int] = None


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=502, content=exc.to_dict())


@app.exception_handler(NotFound)
async def _not_found(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(AggregationError)
async def _aggregation_error(request: Request, exc: AggregationError):
    logger.error("Aggregation failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
def health():
    """Health check for load balancers / readiness."""
    return {"status": "ok", "service": "ppc-metrics"}


@app.get("/query/date-filter")
def date_filter(days: int = Query(DEFAULT_METRICS_DAYS)):
    try:
        clause = build_date_filter(days, date.today())
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"days": days, "clause": clause}


@app.post("/campaigns/{campaign_id}/detail")
def campaign_detail(campaign_id: str, body: CampaignDetailRequest):
    detail = build_campaign_detail(campaign_id, body.metadata, body.metrics)
    return detail.model_dump()


@app.post("/campaigns/{campaign_id}/daily-metrics")
def daily_metrics(campaign_id: str, body: GaqlResponseRequest):
    rows = build_daily_metrics(campaign_id, body.response)
    return {"campaign_id": campaign_id, "rows": [r.model_dump() for r in rows]}


@app.post("/campaigns/{campaign_id}/budget-pacing")
def budget_pacing(campaign_id: str, body: BudgetPacingRequest):
    try:
        pacing = build_budget_pacing(campaign_id, body.response, body.daily_budget_micros, window_days=body.window_days)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"campaign_id": campaign_id, **pacing.model_dump()}


@app.post("/campaigns")
def campaigns(body: GaqlResponseRequest):
    summaries = build_campaign_list(body.response)
    return {"campaigns": [s.model_dump() for s in summaries]}
