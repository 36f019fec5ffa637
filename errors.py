"""
PPC Metrics – error taxonomy shared by the query, validation and aggregation layers.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


class MetricsLayerError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(MetricsLayerError, ValueError):
    """Malformed input to a builder or deriver (e.g. a non-positive day count)."""


class NotFound(MetricsLayerError):
    """A single-entity lookup returned no rows when at least one was required."""


class AggregationError(MetricsLayerError):
    """Rows handed to the aggregator disagree on entity key or repeat a date."""


@dataclass(frozen=True)
class FieldIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class ValidationError(MetricsLayerError):
    """Response shape/type mismatch. Raised only by strict parsing."""

    def __init__(self, context: str, issues: Sequence[FieldIssue], message: Optional[str] = None):
        self.context = context
        self.issues: List[FieldIssue] = list(issues)
        if message is None:
            summary = "; ".join(str(i) for i in self.issues[:5]) or "unknown error"
            if len(self.issues) > 5:
                summary += f" (+{len(self.issues) - 5} more)"
            message = f"Invalid GAQL response for {context}: {summary}"
        super().__init__(message)

    @property
    def paths(self) -> List[str]:
        return [i.path for i in self.issues]

    def to_dict(self) -> dict:
        return {
            "detail": str(self),
            "context": self.context,
            "issues": [{"path": i.path, "message": i.message} for i in self.issues],
        }
