"""In-memory last value price service with atomic batch visibility."""

from __future__ import annotations

import logging
import uuid
from collections import deque
from collections.abc import Sequence
from threading import Lock
from uuid import UUID

from .batch import Batch, BatchStatus
from .errors import BatchClosedError, ConflictError, NotFoundError, ValidationError
from .ids import BatchIdSource
from .interface import PriceConsumer, PriceProducer
from .models import PriceRecord
from .store import CommittedPriceStore

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 1000
CLOSED_HISTORY_SIZE = 1024


class InMemoryLastValuePriceService(PriceProducer, PriceConsumer):
    """Batch lifecycle manager in front of a committed price store.

    At most one batch is active at a time. Its staged records live only in
    the Batch object held in ``_active``; consumers read the committed store
    and never see them.

    Locking:
        ``_lock`` guards the active-batch slot for the full duration of
        start/publish/complete/cancel, including the commit merge.
        ``get_last_price`` only takes the store's own lock.
    """

    def __init__(
        self,
        store: CommittedPriceStore | None = None,
        id_source: BatchIdSource = uuid.uuid4,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        closed_history: int = CLOSED_HISTORY_SIZE,
    ) -> None:
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        if closed_history < 0:
            raise ValueError(f"closed_history must be >= 0, got {closed_history}")

        self._store = store if store is not None else CommittedPriceStore()
        self._id_source = id_source
        self._max_chunk_size = max_chunk_size
        self._lock = Lock()
        self._active: Batch | None = None

        # Ids only; closed batches themselves are dropped immediately
        self._closed_order: deque[UUID] = deque()
        self._closed_ids: set[UUID] = set()
        self._closed_limit = closed_history

    # --- Producer API ---

    def start_batch(self) -> UUID:
        with self._lock:
            if self._active is not None and not self._active.status.is_terminal:
                logger.warning("Rejected start_batch: batch %s is active", self._active.batch_id)
                raise ConflictError("Another batch is active")

            batch = Batch(self._id_source())
            self._active = batch
            logger.info("Batch %s started", batch.batch_id)
            return batch.batch_id

    def publish_prices(self, batch_id: UUID, records: Sequence[PriceRecord] | None) -> None:
        if records is None:
            return
        records = list(records)
        if not records:
            return

        if len(records) > self._max_chunk_size:
            raise ValidationError(
                f"Chunk of {len(records)} records exceeds limit of {self._max_chunk_size}"
            )
        for record in records:
            if not isinstance(record, PriceRecord):
                raise ValidationError(
                    f"Expected PriceRecord, got {type(record).__name__}"
                )

        with self._lock:
            batch = self._validate_active_batch(batch_id)
            changed = batch.stage(records)
            logger.debug(
                "Batch %s: staged %d records (%d changed, %d instruments)",
                batch_id,
                len(records),
                changed,
                len(batch),
            )

    def complete_batch(self, batch_id: UUID) -> None:
        with self._lock:
            batch = self._validate_active_batch(batch_id)
            changed = self._store.merge(batch.staged.values())
            batch.transition(BatchStatus.COMPLETED)
            self._close(batch)
            logger.info(
                "Batch %s completed: %d staged, %d committed",
                batch_id,
                len(batch),
                changed,
            )

    def cancel_batch(self, batch_id: UUID) -> None:
        with self._lock:
            batch = self._validate_active_batch(batch_id)
            batch.transition(BatchStatus.CANCELLED)
            self._close(batch)
            logger.info("Batch %s cancelled: %d staged records discarded", batch_id, len(batch))

    # --- Consumer API ---

    def get_last_price(self, instrument_id: str) -> PriceRecord | None:
        return self._store.get(instrument_id)

    def get_all_prices(self) -> dict[str, PriceRecord]:
        """Snapshot of every committed price."""
        return self._store.get_all()

    @property
    def store(self) -> CommittedPriceStore:
        return self._store

    @property
    def has_active_batch(self) -> bool:
        """Whether a batch is currently open. Advisory only; may be stale."""
        active = self._active
        return active is not None and not active.status.is_terminal

    # --- Internal ---

    def _validate_active_batch(self, batch_id: UUID) -> Batch:
        """Return the active batch if ``batch_id`` names it. Caller holds the lock."""
        active = self._active
        if active is None:
            if batch_id in self._closed_ids:
                raise self._rejected(batch_id, BatchClosedError(f"Batch {batch_id} is already closed"))
            raise self._rejected(batch_id, NotFoundError("No active batch found"))
        if active.batch_id != batch_id:
            if batch_id in self._closed_ids:
                raise self._rejected(batch_id, BatchClosedError(f"Batch {batch_id} is already closed"))
            raise self._rejected(batch_id, ValidationError(f"Invalid batch id {batch_id}"))
        if active.status.is_terminal:
            raise self._rejected(batch_id, BatchClosedError(f"Batch {batch_id} is already closed"))
        return active

    @staticmethod
    def _rejected(batch_id: UUID, error: Exception) -> Exception:
        logger.warning("Rejected operation on batch %s: %s", batch_id, error)
        return error

    def _close(self, batch: Batch) -> None:
        """Drop the active batch and remember its id. Caller holds the lock."""
        self._active = None
        if self._closed_limit == 0:
            return
        self._closed_order.append(batch.batch_id)
        self._closed_ids.add(batch.batch_id)
        while len(self._closed_order) > self._closed_limit:
            self._closed_ids.discard(self._closed_order.popleft())
