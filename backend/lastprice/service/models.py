"""Data models for committed and staged prices."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from .errors import ValidationError

PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True, slots=True)
class PriceRecord(Generic[PayloadT]):
    """Immutable observation of one instrument's price at a point in time.

    The payload is opaque to the service: only ``instrument_id`` and ``as_of``
    take part in staging and commit decisions.
    """

    instrument_id: str
    as_of: datetime
    payload: PayloadT | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.instrument_id, str) or not self.instrument_id:
            raise ValidationError("instrument_id must be a non-empty string")
        if not isinstance(self.as_of, datetime):
            raise ValidationError(f"as_of must be a datetime, got {type(self.as_of).__name__}")
        if self.as_of.tzinfo is None or self.as_of.utcoffset() is None:
            # Naive and aware datetimes cannot be ordered against each other
            raise ValidationError(f"as_of must be timezone-aware, got {self.as_of.isoformat()}")

    def is_newer_than(self, other: PriceRecord) -> bool:
        """True if this record's as_of is strictly later than ``other``'s."""
        return self.as_of > other.as_of

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON / SSE transmission."""
        return {
            "instrument_id": self.instrument_id,
            "as_of": self.as_of.isoformat(),
            "payload": self.payload,
        }
