"""SSE streaming endpoint for committed price changes."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Mapping

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .models import PriceRecord
from .store import CommittedPriceStore

logger = logging.getLogger(__name__)


def create_stream_router(store: CommittedPriceStore, interval: float = 0.5) -> APIRouter:
    """Create the SSE streaming router with a reference to the committed store.

    Only committed prices are streamed; staged batch data never reaches the
    store and therefore never reaches a client.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/prices")
    async def stream_prices(request: Request) -> StreamingResponse:
        """SSE endpoint for committed price changes.

        The first event is a ``snapshot`` of every committed price. After
        that, each completed batch that changed the store produces one
        ``commit`` event carrying only the instruments it changed:

            event: commit
            id: 7
            data: {"AAPL": {"instrument_id": "AAPL", "as_of": "...", "payload": ...}}
        """
        return StreamingResponse(
            _generate_events(store, request, interval),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


def _changed(
    previous: Mapping[str, PriceRecord], current: Mapping[str, PriceRecord]
) -> dict[str, PriceRecord]:
    """Entries of ``current`` that are new or differ from ``previous``."""
    return {
        instrument: record
        for instrument, record in current.items()
        if previous.get(instrument) != record
    }


def _format_event(event: str, version: int, prices: Mapping[str, PriceRecord]) -> str:
    data = {instrument: record.to_dict() for instrument, record in prices.items()}
    return f"event: {event}\nid: {version}\ndata: {json.dumps(data, default=str)}\n\n"


async def _generate_events(
    store: CommittedPriceStore,
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Yield a snapshot event, then one commit event per store change.

    The store version is polled every ``interval`` seconds; the generator
    stops when the client disconnects.
    """
    yield "retry: 1000\n\n"

    sent: dict[str, PriceRecord] = {}
    seen_version = -1
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while not await request.is_disconnected():
            version = store.version
            if version != seen_version:
                prices = store.get_all()
                if seen_version < 0:
                    yield _format_event("snapshot", version, prices)
                else:
                    delta = _changed(sent, prices)
                    if delta:
                        yield _format_event("commit", version, delta)
                sent = prices
                seen_version = version

            await asyncio.sleep(interval)
        logger.info("SSE client disconnected: %s", client_ip)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
        raise
