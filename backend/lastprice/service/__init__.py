"""Last value price service.

Public API:
    PriceRecord                   - Immutable price observation dataclass
    BatchStatus                   - Batch lifecycle states
    InMemoryLastValuePriceService - Batch lifecycle manager + consumer lookups
    CommittedPriceStore           - Thread-safe consumer-visible price store
    PriceProducer / PriceConsumer - Abstract service contracts
    select_latest                 - Latest-wins selection between two records
    create_price_service          - Factory reading environment configuration
    create_app                    - FastAPI app exposing the service over HTTP + SSE
"""

from .api import create_app, create_price_router
from .batch import BatchStatus
from .errors import (
    BatchClosedError,
    ConflictError,
    NotFoundError,
    PriceServiceError,
    StateError,
    ValidationError,
)
from .factory import create_price_service
from .ids import SequentialIdSource
from .interface import PriceConsumer, PriceProducer
from .manager import InMemoryLastValuePriceService
from .merge import select_latest
from .models import PriceRecord
from .store import CommittedPriceStore
from .stream import create_stream_router

__all__ = [
    "PriceRecord",
    "BatchStatus",
    "InMemoryLastValuePriceService",
    "CommittedPriceStore",
    "PriceProducer",
    "PriceConsumer",
    "select_latest",
    "create_price_service",
    "SequentialIdSource",
    "create_app",
    "create_price_router",
    "create_stream_router",
    "PriceServiceError",
    "ValidationError",
    "ConflictError",
    "StateError",
    "NotFoundError",
    "BatchClosedError",
]
