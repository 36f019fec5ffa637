"""
PPC Metrics – rollups of per-day metric rows.

Counters are summed; every rate is then derived from the sums. Per-row rates
(the backend's ctr / average_cpc) are never averaged, because a plain mean
weights a 10-impression day the same as a 10,000-impression day.

Float counters are totalled as exact fractions of their decimal values and
rounded to float once, so a rollup does not depend on row order or on how
rows were split into partial rollups.
"""

import logging
import math
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, PrivateAttr

from config import MICROS_PER_UNIT
from errors import AggregationError

logger = logging.getLogger(__name__)

INT_COUNTERS = ("impressions", "clicks", "cost_micros", "interactions", "engagements", "invalid_clicks")
FLOAT_COUNTERS = (
    "conversions", "conversions_value", "all_conversions", "all_conversions_value", "view_through_conversions",
)
ADDITIVE_COUNTERS = INT_COUNTERS + FLOAT_COUNTERS

DERIVED_RATES = (
    "ctr", "average_cpc", "average_cpm", "cost_per_conversion", "conversion_rate",
    "roas", "interaction_rate", "engagement_rate", "invalid_click_rate",
)


class Rollup(BaseModel):
    """One entity's metrics over a date range. Money fields are micros; *_rate and ctr are percentages."""

    model_config = ConfigDict(frozen=True)

    entity_id: str = ""
    row_count: int = 0
    first_date: str = ""
    last_date: str = ""

    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    interactions: int = 0
    engagements: int = 0
    invalid_clicks: int = 0
    conversions: float = 0.0
    conversions_value: float = 0.0
    all_conversions: float = 0.0
    all_conversions_value: float = 0.0
    view_through_conversions: float = 0.0

    ctr: float = 0.0
    average_cpc: float = 0.0
    average_cpm: float = 0.0
    cost_per_conversion: float = 0.0
    conversion_rate: float = 0.0
    roas: float = 0.0
    interaction_rate: float = 0.0
    engagement_rate: float = 0.0
    invalid_click_rate: float = 0.0

    # non-zero float counter totals, kept exact; not serialised
    _exact_totals: Dict[str, Fraction] = PrivateAttr(default_factory=dict)

    def counters(self) -> Dict[str, Any]:
        """Additive counters: ints as stored, float counters as exact fractions."""
        totals: Dict[str, Any] = {name: getattr(self, name) for name in INT_COUNTERS}
        for name in FLOAT_COUNTERS:
            exact = self._exact_totals.get(name)
            totals[name] = exact if exact is not None else _exact(getattr(self, name), name)
        return totals


def _ratio(numerator: Any, denominator: Any, scale: int = 1) -> float:
    """numerator * scale / denominator, or 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return float((numerator * scale) / denominator)


def derive_rates(counters: Mapping[str, Any]) -> Dict[str, float]:
    impressions = counters.get("impressions", 0)
    clicks = counters.get("clicks", 0)
    cost_micros = counters.get("cost_micros", 0)
    conversions = counters.get("conversions", 0)
    return {
        "ctr": _ratio(clicks, impressions, 100),
        "average_cpc": _ratio(cost_micros, clicks),
        "average_cpm": _ratio(cost_micros, impressions, 1000),
        "cost_per_conversion": _ratio(cost_micros, conversions),
        "conversion_rate": _ratio(conversions, clicks, 100),
        "roas": _ratio(counters.get("conversions_value", 0) * MICROS_PER_UNIT, cost_micros),
        "interaction_rate": _ratio(counters.get("interactions", 0), impressions, 100),
        "engagement_rate": _ratio(counters.get("engagements", 0), impressions, 100),
        "invalid_click_rate": _ratio(counters.get("invalid_clicks", 0), clicks, 100),
    }


def _exact(value: Any, name: str) -> Fraction:
    number = float(value)
    if not math.isfinite(number):
        raise AggregationError(f"{name} must be finite, got {value!r}")
    # str() is the shortest decimal that round-trips, i.e. the value as reported
    return Fraction(str(number))


def _value(row: Any, name: str) -> Any:
    value = row.get(name) if isinstance(row, Mapping) else getattr(row, name, None)
    return 0 if value is None else value


def _key(row: Any, name: str) -> str:
    value = row.get(name) if isinstance(row, Mapping) else getattr(row, name, None)
    return "" if value is None else str(value)


def _check_mapping_rows(rows: Sequence[Any], entity_key: str) -> None:
    """Plain mapping rows must use attribute names, not raw GAQL keys."""
    known = set(ADDITIVE_COUNTERS) | {entity_key, "date"}
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            continue
        dotted = sorted(k for k in row if isinstance(k, str) and "." in k)
        if dotted:
            raise AggregationError(
                f"Row {i} has raw GAQL keys ({', '.join(dotted[:3])}); validate the response before aggregating"
            )
        if not known.intersection(row):
            raise AggregationError(f"Row {i} has none of the known metric keys")


def _entity_id(rows: Sequence[Any], entity_key: str) -> str:
    keys = {_key(r, entity_key) for r in rows} - {""}
    if len(keys) > 1:
        raise AggregationError(f"Rows reference more than one {entity_key}: {', '.join(sorted(keys))}")
    return keys.pop() if keys else ""


def _dates(rows: Sequence[Any]) -> List[str]:
    dates = [d for d in (_key(r, "date") for r in rows) if d]
    seen = set()
    for d in dates:
        if d in seen:
            raise AggregationError(f"Date {d} appears more than once for the same entity")
        seen.add(d)
    return dates


def _row_counters(row: Any) -> Dict[str, Any]:
    counters: Dict[str, Any] = {name: int(_value(row, name)) for name in INT_COUNTERS}
    counters.update({name: _exact(_value(row, name), name) for name in FLOAT_COUNTERS})
    return counters


def _sum_counters(parts: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    totals: Dict[str, Any] = {name: 0 for name in INT_COUNTERS}
    totals.update({name: Fraction(0) for name in FLOAT_COUNTERS})
    for part in parts:
        for name in ADDITIVE_COUNTERS:
            totals[name] += part[name]
    return totals


def _build(entity_id: str, row_count: int, first_date: str, last_date: str, totals: Dict[str, Any]) -> Rollup:
    counters = {name: totals[name] for name in INT_COUNTERS}
    counters.update({name: float(totals[name]) for name in FLOAT_COUNTERS})
    rollup = Rollup(
        entity_id=entity_id,
        row_count=row_count,
        first_date=first_date,
        last_date=last_date,
        **counters,
        **derive_rates(totals),
    )
    rollup._exact_totals = {name: totals[name] for name in FLOAT_COUNTERS if totals[name]}
    return rollup


def aggregate_rows(rows: Iterable[Any], entity_key: str = "campaign_id") -> Rollup:
    """Roll up rows (typed rows or plain dicts) for a single entity. Zero rows give an all-zero rollup."""
    rows = list(rows)
    _check_mapping_rows(rows, entity_key)
    entity_id = _entity_id(rows, entity_key)
    dates = _dates(rows)
    return _build(
        entity_id,
        len(rows),
        min(dates) if dates else "",
        max(dates) if dates else "",
        _sum_counters(_row_counters(r) for r in rows),
    )


def combine_rollups(*rollups: Rollup) -> Rollup:
    """Merge partial rollups of the same entity; equal to aggregating all their rows at once."""
    if not rollups:
        return Rollup()
    ids = {r.entity_id for r in rollups} - {""}
    if len(ids) > 1:
        raise AggregationError(f"Cannot combine rollups of different entities: {', '.join(sorted(ids))}")
    firsts = [r.first_date for r in rollups if r.first_date]
    lasts = [r.last_date for r in rollups if r.last_date]
    return _build(
        ids.pop() if ids else "",
        sum(r.row_count for r in rollups),
        min(firsts) if firsts else "",
        max(lasts) if lasts else "",
        _sum_counters(r.counters() for r in rollups),
    )


def aggregate_by_entity(rows: Iterable[Any], entity_key: str = "campaign_id") -> Dict[str, Rollup]:
    """Group multi-entity rows by entity_key and roll each group up (first-seen order)."""
    groups: Dict[str, List[Any]] = {}
    for i, row in enumerate(rows):
        key = _key(row, entity_key)
        if not key:
            raise AggregationError(f"Row {i} has no {entity_key}")
        groups.setdefault(key, []).append(row)
    rollups = {key: aggregate_rows(group, entity_key) for key, group in groups.items()}
    logger.debug("aggregate_by_entity: %s rows -> %s %s rollups", sum(len(g) for g in groups.values()), len(rollups), entity_key)
    return rollups
