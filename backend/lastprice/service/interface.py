"""Abstract producer and consumer contracts for the price service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from uuid import UUID

from .models import PriceRecord


class PriceProducer(ABC):
    """Contract for producers publishing prices in batch runs.

    Lifecycle:
        batch_id = service.start_batch()
        service.publish_prices(batch_id, chunk_1)
        service.publish_prices(batch_id, chunk_2)
        # ... either ...
        service.complete_batch(batch_id)   # all chunks become visible at once
        # ... or ...
        service.cancel_batch(batch_id)     # nothing becomes visible
    """

    @abstractmethod
    def start_batch(self) -> UUID:
        """Open a new batch and return its id.

        Raises ConflictError if another batch is still active. Callers should
        treat that as "retry later".
        """

    @abstractmethod
    def publish_prices(self, batch_id: UUID, records: Sequence[PriceRecord] | None) -> None:
        """Stage a chunk of records (at most 1000 by default) in the batch.

        Empty or None input is a no-op. Staged records stay invisible to
        consumers until the batch is completed.
        """

    @abstractmethod
    def complete_batch(self, batch_id: UUID) -> None:
        """Make every record staged in the batch visible atomically."""

    @abstractmethod
    def cancel_batch(self, batch_id: UUID) -> None:
        """Discard the batch and everything staged in it."""


class PriceConsumer(ABC):
    """Contract for consumers reading the last committed price."""

    @abstractmethod
    def get_last_price(self, instrument_id: str) -> PriceRecord | None:
        """Return the last committed price, or None if none was ever committed."""
