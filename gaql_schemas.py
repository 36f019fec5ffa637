"""
PPC Metrics – schema registry for GAQL query responses.

GAQL rows come back as flat dicts keyed by dotted field names
("metrics.impressions", "campaign.status") whose values may be strings or
numbers. Every expected row shape is declared here as a tuple of FieldSpec
descriptors; a frozen pydantic model is generated from each declaration, so
all coercion decisions (string -> number, unknown enum -> UNKNOWN, missing
-> default) live in one table.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Annotated, Any, Callable, Dict, List, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, create_model

from errors import InvalidArgument

UNKNOWN = "UNKNOWN"


class _Required:
    def __repr__(self) -> str:
        return "REQUIRED"


REQUIRED: Any = _Required()

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_COMPACT_DATE_RE = re.compile(r"^\d{8}$")


@dataclass(frozen=True)
class FieldSpec:
    """One upstream field: dotted key, attribute name, accepted raw types, coercion, default."""

    field: str
    name: str
    type_: Any
    accepted: Tuple[type, ...]
    coerce: Callable[[Any], Any]
    default: Any = REQUIRED

    @property
    def required(self) -> bool:
        return self.default is REQUIRED


@dataclass(frozen=True)
class RowSchema:
    name: str
    fields: Tuple[FieldSpec, ...]
    model: Type[BaseModel]

    @property
    def required_fields(self) -> List[str]:
        return [f.field for f in self.fields if f.required]


class GaqlRow(BaseModel):
    """Base for generated row models: immutable, built from dotted keys, unknown keys dropped."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _type_names(accepted: Tuple[type, ...]) -> str:
    return " | ".join(t.__name__ for t in accepted)


def _check_shape(value: Any, accepted: Tuple[type, ...]) -> None:
    # bool is an int subclass; GAQL never sends booleans for these fields
    if isinstance(value, bool) or not isinstance(value, accepted):
        raise ValueError(f"expected {_type_names(accepted)}, got {type(value).__name__}")


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_number(value: Any) -> float:
    if isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            raise ValueError(f"not a number: {value!r}") from None
    else:
        num = float(value)
    if not math.isfinite(num):
        raise ValueError(f"non-finite number: {value!r}")
    return num


def integer(field: str, name: str, default: Any = 0, non_negative: bool = True) -> FieldSpec:
    """Integer counter (impressions, clicks, cost_micros). Fractional values are rejected."""
    accepted = (str, int, float)

    def coerce(value: Any) -> Any:
        if _missing(value):
            if default is REQUIRED:
                raise ValueError("field required")
            return default
        _check_shape(value, accepted)
        if isinstance(value, int):
            num: Any = value
        else:
            as_float = _to_number(value)
            if not as_float.is_integer():
                raise ValueError(f"expected an integer, got {value!r}")
            num = int(as_float)
        if non_negative and num < 0:
            raise ValueError(f"must be non-negative, got {num}")
        return num

    return FieldSpec(field, name, int, accepted, coerce, default)


def decimal(field: str, name: str, default: Any = 0.0, non_negative: bool = True) -> FieldSpec:
    """Float metric (conversions, conversions_value, rates)."""
    accepted = (str, int, float)

    def coerce(value: Any) -> Any:
        if _missing(value):
            if default is REQUIRED:
                raise ValueError("field required")
            return default
        _check_shape(value, accepted)
        num = _to_number(value)
        if non_negative and num < 0:
            raise ValueError(f"must be non-negative, got {num}")
        return num

    return FieldSpec(field, name, float, accepted, coerce, default)


def identifier(field: str, name: str) -> FieldSpec:
    """Required entity id; numbers are normalised to their string form."""
    accepted = (str, int)

    def coerce(value: Any) -> str:
        if _missing(value):
            raise ValueError("identifier required")
        _check_shape(value, accepted)
        return str(value).strip()

    return FieldSpec(field, name, str, accepted, coerce, REQUIRED)


def text(field: str, name: str, default: Any = REQUIRED) -> FieldSpec:
    accepted = (str, int, float)

    def coerce(value: Any) -> Any:
        if _missing(value):
            if default is REQUIRED:
                raise ValueError("field required")
            return default
        _check_shape(value, accepted)
        return str(value)

    return FieldSpec(field, name, str, accepted, coerce, default)


def enum(field: str, name: str, allowed: Tuple[str, ...], default: str = UNKNOWN) -> FieldSpec:
    """Status-like field. Anything outside the allow-list becomes UNKNOWN instead of failing."""
    accepted = (str, int)
    allowed_set = frozenset(allowed)

    def coerce(value: Any) -> str:
        if _missing(value):
            return default
        if isinstance(value, bool) or not isinstance(value, accepted):
            return UNKNOWN
        candidate = str(value).strip().upper()
        return candidate if candidate in allowed_set else UNKNOWN

    return FieldSpec(field, name, str, accepted, coerce, default)


def iso_date(field: str, name: str, default: Any = REQUIRED) -> FieldSpec:
    """Calendar date as YYYY-MM-DD. Compact YYYYMMDD is normalised."""
    accepted = (str,)

    def coerce(value: Any) -> Any:
        if _missing(value):
            if default is REQUIRED:
                raise ValueError("date required")
            return default
        _check_shape(value, accepted)
        s = value.strip()
        if "T" in s:
            s = s.split("T")[0]
        if _COMPACT_DATE_RE.match(s):
            s = f"{s[:4]}-{s[4:6]}-{s[6:8]}"
        if not _ISO_DATE_RE.match(s):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        try:
            date.fromisoformat(s)
        except ValueError:
            raise ValueError(f"invalid calendar date: {value!r}") from None
        return s

    return FieldSpec(field, name, str, accepted, coerce, default)


def string_list(field: str, name: str) -> FieldSpec:
    """Array-valued field; missing means empty."""
    accepted = (list, tuple)

    def coerce(value: Any) -> List[str]:
        if value is None:
            return []
        _check_shape(value, accepted)
        out = []
        for i, item in enumerate(value):
            if not isinstance(item, str):
                raise ValueError(f"item {i}: expected str, got {type(item).__name__}")
            out.append(item)
        return out

    return FieldSpec(field, name, List[str], accepted, coerce, default=[])


def _model_field(spec: FieldSpec) -> Tuple[Any, Any]:
    annotation = Annotated[spec.type_, BeforeValidator(spec.coerce)]
    if spec.required:
        return annotation, Field(..., alias=spec.field)
    if isinstance(spec.default, list):
        return annotation, Field(default_factory=list, alias=spec.field)
    return annotation, Field(default=spec.default, alias=spec.field)


SCHEMA_REGISTRY: Dict[str, RowSchema] = {}


def define_schema(name: str, model_name: str, fields: Tuple[FieldSpec, ...]) -> RowSchema:
    """Generate the row model for a declaration and register it under name."""
    seen = set()
    for spec in fields:
        if spec.name in seen:
            raise InvalidArgument(f"Duplicate field name '{spec.name}' in schema '{name}'")
        seen.add(spec.name)
    model = create_model(model_name, __base__=GaqlRow, **{spec.name: _model_field(spec) for spec in fields})
    schema = RowSchema(name=name, fields=tuple(fields), model=model)
    SCHEMA_REGISTRY[name] = schema
    return schema


def get_schema(name: str) -> RowSchema:
    schema = SCHEMA_REGISTRY.get(name)
    if schema is None:
        raise InvalidArgument(f"Unknown GAQL schema '{name}'. Known: {', '.join(sorted(SCHEMA_REGISTRY))}")
    return schema


# --- Enum allow-lists ---

CAMPAIGN_STATUSES = ("ENABLED", "PAUSED", "REMOVED", UNKNOWN)

ADVERTISING_CHANNEL_TYPES = (
    "SEARCH", "DISPLAY", "SHOPPING", "HOTEL", "VIDEO", "MULTI_CHANNEL", "LOCAL", "SMART",
    "PERFORMANCE_MAX", "LOCAL_SERVICES", "TRAVEL", "DEMAND_GEN", UNKNOWN,
)

BIDDING_STRATEGY_TYPES = (
    "MAXIMIZE_CONVERSION_VALUE", "MAXIMIZE_CONVERSIONS", "TARGET_CPA", "TARGET_ROAS",
    "TARGET_IMPRESSION_SHARE", "TARGET_SPEND", "MANUAL_CPC", "MANUAL_CPM", "MANUAL_CPV",
    "ENHANCED_CPC", "COMMISSION", "UNSPECIFIED", UNKNOWN,
)

ASSET_GROUP_STATUSES = ("ENABLED", "PAUSED", "REMOVED", UNKNOWN)


# --- Shared metric declarations ---

def _core_metrics() -> Tuple[FieldSpec, ...]:
    return (
        integer("metrics.impressions", "impressions"),
        integer("metrics.clicks", "clicks"),
        integer("metrics.cost_micros", "cost_micros"),
        decimal("metrics.conversions", "conversions"),
        decimal("metrics.conversions_value", "conversions_value"),
    )


CAMPAIGN = define_schema(
    "campaign",
    "CampaignRow",
    (
        identifier("campaign.id", "campaign_id"),
        text("campaign.name", "campaign_name"),
        enum("campaign.status", "status", CAMPAIGN_STATUSES),
        enum("campaign.advertising_channel_type", "advertising_channel_type", ADVERTISING_CHANNEL_TYPES),
        iso_date("segments.date", "date", default=""),
    ) + _core_metrics(),
)

CAMPAIGN_METADATA = define_schema(
    "campaign_metadata",
    "CampaignMetadataRow",
    (
        identifier("campaign.id", "campaign_id"),
        text("campaign.name", "campaign_name"),
        enum("campaign.status", "status", CAMPAIGN_STATUSES),
        enum("campaign.bidding_strategy_type", "bidding_strategy_type", BIDDING_STRATEGY_TYPES, default="UNSPECIFIED"),
        decimal("campaign.optimization_score", "optimization_score"),
        iso_date("campaign.start_date", "start_date", default=""),
        iso_date("campaign.end_date", "end_date", default=""),
        integer("campaign_budget.amount_micros", "budget_amount_micros"),
    ),
)

CAMPAIGN_METRICS = define_schema(
    "campaign_metrics",
    "CampaignMetricsRow",
    (
        identifier("campaign.id", "campaign_id"),
        iso_date("segments.date", "date", default=""),
    ) + _core_metrics() + (
        decimal("metrics.all_conversions", "all_conversions"),
        decimal("metrics.all_conversions_value", "all_conversions_value"),
        decimal("metrics.view_through_conversions", "view_through_conversions"),
        integer("metrics.interactions", "interactions"),
        integer("metrics.engagements", "engagements"),
        integer("metrics.invalid_clicks", "invalid_clicks"),
    ),
)

# ctr / average_cpc are the backend's per-day values; rollups never read them
DAILY_METRICS = define_schema(
    "daily_metrics",
    "DailyMetricsRow",
    (iso_date("segments.date", "date"),) + _core_metrics() + (
        decimal("metrics.ctr", "ctr"),
        decimal("metrics.average_cpc", "average_cpc"),
    ),
)

ASSET_GROUP = define_schema(
    "asset_group",
    "AssetGroupRow",
    (
        identifier("asset_group_id", "asset_group_id"),
        text("asset_group_name", "asset_group_name"),
        enum("status", "status", ASSET_GROUP_STATUSES),
        string_list("final_urls", "final_urls"),
    ),
)

CampaignRow = CAMPAIGN.model
CampaignMetadataRow = CAMPAIGN_METADATA.model
CampaignMetricsRow = CAMPAIGN_METRICS.model
DailyMetricsRow = DAILY_METRICS.model
AssetGroupRow = ASSET_GROUP.model


def schema_field_keys(schema: RowSchema) -> List[str]:
    """Dotted upstream keys in declaration order (what a query has to SELECT)."""
    return [f.field for f in schema.fields]

