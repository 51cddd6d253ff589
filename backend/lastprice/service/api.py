"""HTTP adapter exposing the price service through FastAPI."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from .errors import ConflictError, NotFoundError, PriceServiceError, StateError, ValidationError
from .manager import InMemoryLastValuePriceService
from .models import PriceRecord
from .stream import create_stream_router

logger = logging.getLogger(__name__)


class PriceIn(BaseModel):
    instrument_id: str = Field(min_length=1)
    as_of: datetime
    payload: Any = None

    def to_record(self) -> PriceRecord:
        return PriceRecord(instrument_id=self.instrument_id, as_of=self.as_of, payload=self.payload)


class PublishRequest(BaseModel):
    records: list[PriceIn] | None = None


def _to_http(exc: PriceServiceError) -> HTTPException:
    """Map a service error onto an HTTP status."""
    if isinstance(exc, ValidationError):
        code = 422
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ConflictError, StateError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


def create_price_router(service: InMemoryLastValuePriceService) -> APIRouter:
    """Create the batch lifecycle and lookup router bound to ``service``.

    Handlers are plain functions, so FastAPI runs them in its threadpool and
    the service's blocking lock never stalls the event loop.
    """
    router = APIRouter(prefix="/api", tags=["prices"])

    @router.post("/batches", status_code=status.HTTP_201_CREATED)
    def start_batch() -> dict[str, str]:
        try:
            batch_id = service.start_batch()
        except PriceServiceError as e:
            raise _to_http(e) from e
        return {"batch_id": str(batch_id)}

    @router.post("/batches/{batch_id}/prices", status_code=status.HTTP_202_ACCEPTED)
    def publish_prices(batch_id: UUID, body: PublishRequest) -> dict[str, int]:
        try:
            records = [item.to_record() for item in body.records or []]
            service.publish_prices(batch_id, records)
        except PriceServiceError as e:
            raise _to_http(e) from e
        return {"accepted": len(records)}

    @router.post("/batches/{batch_id}/complete")
    def complete_batch(batch_id: UUID) -> dict[str, str]:
        try:
            service.complete_batch(batch_id)
        except PriceServiceError as e:
            raise _to_http(e) from e
        return {"batch_id": str(batch_id), "status": "COMPLETED"}

    @router.post("/batches/{batch_id}/cancel")
    def cancel_batch(batch_id: UUID) -> dict[str, str]:
        try:
            service.cancel_batch(batch_id)
        except PriceServiceError as e:
            raise _to_http(e) from e
        return {"batch_id": str(batch_id), "status": "CANCELLED"}

    @router.get("/prices/{instrument_id}")
    def get_last_price(instrument_id: str) -> dict[str, Any]:
        record = service.get_last_price(instrument_id)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No committed price for {instrument_id}",
            )
        return record.to_dict()

    @router.get("/prices")
    def get_all_prices() -> dict[str, dict[str, Any]]:
        return {instrument: record.to_dict() for instrument, record in service.get_all_prices().items()}

    return router


def create_app(service: InMemoryLastValuePriceService) -> FastAPI:
    """Assemble a FastAPI app with the lifecycle, lookup and SSE routers."""
    app = FastAPI(title="Last Value Price Service")
    app.include_router(create_price_router(service))
    app.include_router(create_stream_router(service.store))
    logger.info("HTTP app created")
    return app
