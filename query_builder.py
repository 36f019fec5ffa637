"""
PPC Metrics – GAQL query construction.

Every function here is a pure function of its arguments; "now" is always
passed in so callers (and tests) pin the clock.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from config import CAMPAIGN_CHANNEL_TYPE, normalize_campaign_id
from errors import InvalidArgument
from gaql_schemas import CAMPAIGN, CAMPAIGN_METADATA, CAMPAIGN_METRICS, DAILY_METRICS, RowSchema, schema_field_keys

# Day counts GAQL can express as a named relative range (segments.date DURING LAST_N_DAYS)
FAST_PATH_DAYS = frozenset({7, 14, 30, 90})


def _as_date(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        return now.date()
    if isinstance(now, date):
        return now
    raise InvalidArgument(f"now must be a date or datetime, got {type(now).__name__}")


def _validate_days(days: int) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise InvalidArgument(f"days must be a positive integer, got {days!r}")
    if days <= 0:
        raise InvalidArgument(f"days must be a positive integer, got {days}")
    return days


def relative_range_keyword(days: int) -> Optional[str]:
    """LAST_N_DAYS keyword for a fast-path day count, else None."""
    return f"LAST_{days}_DAYS" if days in FAST_PATH_DAYS else None


def date_bounds(days: int, now: Union[date, datetime]) -> Tuple[str, str]:
    """(start, end) as YYYY-MM-DD with start = now - days and end = now."""
    _validate_days(days)
    end = _as_date(now)
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def build_date_filter(days: int, now: Union[date, datetime]) -> str:
    """segments.date clause for the last `days` days relative to `now`."""
    _validate_days(days)
    _as_date(now)
    keyword = relative_range_keyword(days)
    if keyword:
        return f"segments.date DURING {keyword}"
    start, end = date_bounds(days, now)
    return f"segments.date BETWEEN '{start}' AND '{end}'"


def _campaign_id_clause(campaign_id: object) -> str:
    cid = normalize_campaign_id(campaign_id)
    if not cid or not cid.isdigit():
        raise InvalidArgument(f"campaign_id must be numeric, got {campaign_id!r}")
    return f"campaign.id = {cid}"


def _where(*clauses: str) -> str:
    parts = []
    if CAMPAIGN_CHANNEL_TYPE:
        parts.append(f"campaign.advertising_channel_type = '{CAMPAIGN_CHANNEL_TYPE}'")
    parts.extend(c for c in clauses if c)
    return "\n        AND ".join(parts)


def _select(schema: RowSchema) -> str:
    return ",\n               ".join(schema_field_keys(schema))


def build_campaign_metadata_query(campaign_id: object) -> str:
    """Campaign settings with no date filter: returns a row whenever the campaign exists."""
    return f"""
        SELECT {_select(CAMPAIGN_METADATA)}
        FROM campaign
        WHERE {_where(_campaign_id_clause(campaign_id))}
    """


def build_campaign_metrics_query(campaign_id: object, days: int, now: Union[date, datetime]) -> str:
    """Per-day metric rows for one campaign; the caller must aggregate them."""
    return f"""
        SELECT {_select(CAMPAIGN_METRICS)}
        FROM campaign
        WHERE {_where(_campaign_id_clause(campaign_id), build_date_filter(days, now))}
    """


def build_daily_metrics_query(campaign_id: object, days: int, now: Union[date, datetime]) -> str:
    """Daily time series for charts, oldest day first."""
    return f"""
        SELECT {_select(DAILY_METRICS)}
        FROM campaign
        WHERE {_where(_campaign_id_clause(campaign_id), build_date_filter(days, now))}
        ORDER BY segments.date ASC
    """


def build_campaign_list_query(days: int, now: Union[date, datetime]) -> str:
    """All non-removed campaigns, one row per campaign per day."""
    return f"""
        SELECT {_select(CAMPAIGN)}
        FROM campaign
        WHERE {_where("campaign.status != 'REMOVED'", build_date_filter(days, now))}
    """
