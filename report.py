"""
PPC Metrics – command-line rollups from saved GAQL responses.

  python report.py --days 45 [--today 2026-02-11]
  python report.py --input daily.json --campaign-id 123 [--budget-micros 50000000] [--window-days 7] [--strict]

--input is a JSON file shaped like the query endpoint's reply: {"rows": [...]}.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from budget_deriver import daily_spend_series, derive_budget_pacing
from campaign_metrics import build_daily_metrics
from config import LOG_FORMAT, LOG_LEVEL, normalize_campaign_id
from errors import MetricsLayerError
from gaql_schemas import DAILY_METRICS
from metrics_aggregator import aggregate_rows
from query_builder import build_date_filter
from response_validator import parse_gaql_response

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def run_report(
    raw: Any,
    campaign_id: str,
    budget_micros: Optional[int] = None,
    window_days: Optional[int] = None,
    strict: bool = False,
) -> Dict[str, Any]:
    """Validate a daily-metrics response and return the rollup (plus pacing when a budget is given)."""
    if strict:
        context = f"getDailyMetrics({normalize_campaign_id(campaign_id)})"
        rows: List[Any] = sorted(parse_gaql_response(DAILY_METRICS, raw, context), key=lambda r: r.date)
    else:
        rows = build_daily_metrics(campaign_id, raw)
    rollup = aggregate_rows(rows)
    result: Dict[str, Any] = {"campaign_id": campaign_id, "rollup": rollup.model_dump()}
    if budget_micros is not None:
        pacing = derive_budget_pacing(daily_spend_series(rows), budget_micros, window_days=window_days)
        result["pacing"] = pacing.model_dump()
    logger.info("report: campaign=%s rows=%s", campaign_id, rollup.row_count)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="PPC Metrics rollups from saved GAQL responses")
    parser.add_argument("--days", type=int, default=None, help="Print the segments.date filter for the last N days")
    parser.add_argument("--today", type=str, default=None, help="Reference date YYYY-MM-DD for --days (default: today)")
    parser.add_argument("--input", type=str, default=None, help="JSON file with a daily-metrics response {\"rows\": [...]}")
    parser.add_argument("--campaign-id", type=str, default="", help="Campaign id (used for context labels)")
    parser.add_argument("--budget-micros", type=int, default=None, help="Daily budget in micros; adds pacing figures")
    parser.add_argument("--window-days", type=int, default=None, help="Rolling window for average daily spend")
    parser.add_argument("--strict", action="store_true", help="Fail on a malformed response instead of reporting zeros")
    args = parser.parse_args(argv)

    if args.days is None and not args.input:
        parser.error("one of --days or --input is required")

    try:
        if args.days is not None:
            try:
                today = date.fromisoformat(args.today) if args.today else date.today()
            except ValueError:
                logger.error("Invalid --today; use YYYY-MM-DD")
                return 1
            print(build_date_filter(args.days, today))
            return 0

        path = Path(args.input)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read %s: %s", path, e)
            return 1
        result = run_report(
            raw,
            campaign_id=args.campaign_id,
            budget_micros=args.budget_micros,
            window_days=args.window_days,
            strict=args.strict,
        )
    except MetricsLayerError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
