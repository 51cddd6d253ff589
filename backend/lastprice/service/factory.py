"""Factory for creating the price service from environment configuration."""

from __future__ import annotations

import logging
import os

from .ids import BatchIdSource
from .manager import CLOSED_HISTORY_SIZE, MAX_CHUNK_SIZE, InMemoryLastValuePriceService
from .store import CommittedPriceStore

logger = logging.getLogger(__name__)


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def create_price_service(
    store: CommittedPriceStore | None = None,
    id_source: BatchIdSource | None = None,
) -> InMemoryLastValuePriceService:
    """Create the price service configured from environment variables.

    - LASTPRICE_MAX_CHUNK_SIZE → max records per publish call (default 1000)
    - LASTPRICE_CLOSED_HISTORY → closed batch ids remembered (default 1024)

    ``id_source`` defaults to random UUIDs.
    """
    max_chunk_size = _int_from_env("LASTPRICE_MAX_CHUNK_SIZE", MAX_CHUNK_SIZE)
    closed_history = _int_from_env("LASTPRICE_CLOSED_HISTORY", CLOSED_HISTORY_SIZE)

    kwargs = {}
    if id_source is not None:
        kwargs["id_source"] = id_source

    service = InMemoryLastValuePriceService(
        store=store,
        max_chunk_size=max_chunk_size,
        closed_history=closed_history,
        **kwargs,
    )
    logger.info(
        "Price service: max chunk size %d, closed batch history %d",
        max_chunk_size,
        closed_history,
    )
    return service
