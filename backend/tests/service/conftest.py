"""Fixtures for price service tests."""

from datetime import datetime, timezone

import pytest

from lastprice.service.ids import SequentialIdSource
from lastprice.service.manager import InMemoryLastValuePriceService
from lastprice.service.models import PriceRecord


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 1, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def at():
    """Build a UTC timestamp on 2024-01-01 from hour and minute."""
    return _at


@pytest.fixture
def make_price():
    """Build a PriceRecord at a given hour with a float payload."""

    def _make(instrument_id: str, hour: int, value: float, minute: int = 0) -> PriceRecord:
        return PriceRecord(instrument_id=instrument_id, as_of=_at(hour, minute), payload=value)

    return _make


@pytest.fixture
def service() -> InMemoryLastValuePriceService:
    """Service with deterministic batch ids."""
    return InMemoryLastValuePriceService(id_source=SequentialIdSource())
