"""
PPC Metrics – budget pacing and monthly projection from daily spend.

All money is in micros. pacing_percentage is a ratio: 1.0 means the recent
average daily spend equals the daily budget.
"""

import math
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from config import (
    DAYS_PER_MONTH,
    PACING_OVERSPEND_THRESHOLD,
    PACING_UNDERSPEND_THRESHOLD,
    PACING_WINDOW_DAYS,
)
from errors import InvalidArgument

UNDERSPENDING = "UNDERSPENDING"
ON_TRACK = "ON_TRACK"
OVERSPENDING = "OVERSPENDING"
UNKNOWN = "UNKNOWN"


class BudgetPacing(BaseModel):
    model_config = ConfigDict(frozen=True)

    daily_budget_micros: int = 0
    window_days: int = 0
    days_of_data: int = 0
    window_spend_micros: int = 0
    avg_daily_spend_micros: float = 0.0
    pacing_percentage: float = 0.0
    projected_monthly_spend_micros: float = 0.0
    monthly_budget_micros: int = 0
    variance_micros: float = 0.0
    variance_percentage: float = 0.0
    pacing_status: str = UNKNOWN


def _check_non_negative(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
        raise InvalidArgument(f"{name} must be a finite non-negative number, got {value!r}")


def _check_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")


def pacing_status(
    pacing_ratio: float,
    daily_budget_micros: int,
    days_of_data: int,
    underspend_threshold: float = PACING_UNDERSPEND_THRESHOLD,
    overspend_threshold: float = PACING_OVERSPEND_THRESHOLD,
) -> str:
    if not daily_budget_micros or not days_of_data:
        return UNKNOWN
    if pacing_ratio < underspend_threshold:
        return UNDERSPENDING
    if pacing_ratio > overspend_threshold:
        return OVERSPENDING
    return ON_TRACK


def derive_budget_pacing(
    daily_spend_micros: Sequence[int],
    daily_budget_micros: int,
    window_days: Optional[int] = None,
    days_per_month: Optional[int] = None,
) -> BudgetPacing:
    """
    Pacing figures from a daily spend series (oldest -> newest).

    The average uses the last `window_days` entries; the projection assumes
    that pace holds for `days_per_month` days. Zero budget or no data gives
    zeros, never NaN/Infinity.
    """
    window_days = PACING_WINDOW_DAYS if window_days is None else window_days
    days_per_month = DAYS_PER_MONTH if days_per_month is None else days_per_month
    _check_positive_int("window_days", window_days)
    _check_positive_int("days_per_month", days_per_month)
    _check_non_negative("daily_budget_micros", daily_budget_micros)
    spend = list(daily_spend_micros)
    for i, value in enumerate(spend):
        _check_non_negative(f"daily_spend_micros[{i}]", value)

    window = spend[-window_days:]
    window_spend = sum(window)
    avg_daily = window_spend / len(window) if window else 0.0
    pacing = avg_daily / daily_budget_micros if daily_budget_micros else 0.0
    projected = avg_daily * days_per_month
    monthly_budget = int(daily_budget_micros * days_per_month)
    variance = projected - monthly_budget
    variance_pct = (variance * 100) / monthly_budget if monthly_budget else 0.0

    return BudgetPacing(
        daily_budget_micros=int(daily_budget_micros),
        window_days=window_days,
        days_of_data=len(window),
        window_spend_micros=int(window_spend),
        avg_daily_spend_micros=avg_daily,
        pacing_percentage=pacing,
        projected_monthly_spend_micros=projected,
        monthly_budget_micros=monthly_budget,
        variance_micros=variance,
        variance_percentage=variance_pct,
        pacing_status=pacing_status(pacing, daily_budget_micros, len(window)),
    )


def daily_spend_series(rows: Iterable[Any]) -> List[int]:
    """cost_micros per row, ordered by date ascending (rows without a date keep their input order at the front)."""
    rows = list(rows)
    ordered = sorted(rows, key=lambda r: getattr(r, "date", "") or "")
    return [int(getattr(r, "cost_micros", 0) or 0) for r in ordered]
