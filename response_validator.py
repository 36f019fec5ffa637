"""
PPC Metrics – GAQL response validation.

validate_response() is pure and returns a tagged ValidationOutcome. The two
call-site policies are built on top of it:

  parse_gaql_response       strict: log one error, raise ValidationError
  parse_gaql_response_safe  best effort: log one warning, return the caller's fallback
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Tuple, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from errors import FieldIssue, ValidationError
from gaql_schemas import RowSchema, get_schema

logger = logging.getLogger(__name__)

T = TypeVar("T")

SchemaRef = Union[RowSchema, str]


@dataclass(frozen=True)
class ValidationOutcome:
    """Success carries typed rows; failure carries every field issue found."""

    context: str
    rows: Tuple[Any, ...] = ()
    issues: Tuple[FieldIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def unwrap(self) -> List[Any]:
        if not self.ok:
            raise ValidationError(self.context, self.issues)
        return list(self.rows)


def _resolve(schema: SchemaRef) -> RowSchema:
    return get_schema(schema) if isinstance(schema, str) else schema


def _issues_from_pydantic(prefix: str, exc: PydanticValidationError) -> List[FieldIssue]:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        issues.append(FieldIssue(path=f"{prefix}.{loc}" if loc else prefix, message=err.get("msg", "invalid")))
    return issues


def validate_response(schema: SchemaRef, data: Any, context: str) -> ValidationOutcome:
    """Validate a raw {"rows": [...]} payload against a registry entry. No side effects."""
    row_schema = _resolve(schema)
    if not isinstance(data, Mapping):
        issue = FieldIssue("", f"expected an object with a 'rows' array, got {type(data).__name__}")
        return ValidationOutcome(context=context, issues=(issue,))
    raw_rows = data.get("rows")
    if raw_rows is None:
        return ValidationOutcome(context=context, issues=(FieldIssue("rows", "field required"),))
    if not isinstance(raw_rows, list):
        issue = FieldIssue("rows", f"expected array, got {type(raw_rows).__name__}")
        return ValidationOutcome(context=context, issues=(issue,))

    rows = []
    issues: List[FieldIssue] = []
    for i, raw in enumerate(raw_rows):
        prefix = f"rows[{i}]"
        if not isinstance(raw, Mapping):
            issues.append(FieldIssue(prefix, f"expected object, got {type(raw).__name__}"))
            continue
        try:
            rows.append(row_schema.model.model_validate(dict(raw)))
        except PydanticValidationError as exc:
            issues.extend(_issues_from_pydantic(prefix, exc))
    if issues:
        return ValidationOutcome(context=context, issues=tuple(issues))
    return ValidationOutcome(context=context, rows=tuple(rows))


def _log_failure(level: int, outcome: ValidationOutcome, schema_name: str, mode: str) -> None:
    summary = "; ".join(str(i) for i in outcome.issues[:5])
    if len(outcome.issues) > 5:
        summary += f" (+{len(outcome.issues) - 5} more)"
    logger.log(
        level,
        "GAQL validation %s for %s (%s): %s",
        "failed" if mode == "strict" else "warning",
        outcome.context,
        schema_name,
        summary,
        extra={
            "context": outcome.context,
            "schema": schema_name,
            "validation_mode": mode,
            "issues": [{"path": i.path, "message": i.message} for i in outcome.issues],
        },
    )


def parse_gaql_response(schema: SchemaRef, data: Any, context: str) -> List[Any]:
    """Strict: typed rows, or ValidationError naming the context and field paths."""
    row_schema = _resolve(schema)
    outcome = validate_response(row_schema, data, context)
    if not outcome.ok:
        _log_failure(logging.ERROR, outcome, row_schema.name, "strict")
    return outcome.unwrap()


def parse_gaql_response_safe(schema: SchemaRef, data: Any, context: str, fallback: T) -> Union[List[Any], T]:
    """Safe-with-fallback: typed rows, or fallback after one logged warning. Never raises on bad data."""
    row_schema = _resolve(schema)
    outcome = validate_response(row_schema, data, context)
    if not outcome.ok:
        _log_failure(logging.WARNING, outcome, row_schema.name, "safe")
        return fallback
    return list(outcome.rows)
