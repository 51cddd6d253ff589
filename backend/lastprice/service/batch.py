"""Batch lifecycle state and staged prices."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from uuid import UUID

from .errors import BatchClosedError, StateError
from .merge import merge_into
from .models import PriceRecord


class BatchStatus(str, Enum):
    """Lifecycle state of a batch run."""

    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.CANCELLED)


_TRANSITIONS: dict[BatchStatus, frozenset[BatchStatus]] = {
    BatchStatus.STARTED: frozenset(
        {BatchStatus.IN_PROGRESS, BatchStatus.COMPLETED, BatchStatus.CANCELLED}
    ),
    BatchStatus.IN_PROGRESS: frozenset(
        {BatchStatus.IN_PROGRESS, BatchStatus.COMPLETED, BatchStatus.CANCELLED}
    ),
    BatchStatus.COMPLETED: frozenset(),
    BatchStatus.CANCELLED: frozenset(),
}


class Batch:
    """One producer session: its status and the records staged so far.

    Not thread-safe on its own. The lifecycle manager only touches a Batch
    while holding its lock, and never hands it out.
    """

    def __init__(self, batch_id: UUID) -> None:
        self._batch_id = batch_id
        self._status = BatchStatus.STARTED
        self._staged: dict[str, PriceRecord] = {}

    @property
    def batch_id(self) -> UUID:
        return self._batch_id

    @property
    def status(self) -> BatchStatus:
        return self._status

    @property
    def staged(self) -> Mapping[str, PriceRecord]:
        """Read-only view of the staged records, one per instrument."""
        return MappingProxyType(self._staged)

    def transition(self, target: BatchStatus) -> None:
        """Move to ``target``, raising StateError if the move is illegal."""
        if self._status.is_terminal:
            raise BatchClosedError(f"Batch {self._batch_id} is already {self._status.value}")
        if target not in _TRANSITIONS[self._status]:
            raise StateError(
                f"Illegal batch transition {self._status.value} -> {target.value}"
            )
        self._status = target

    def stage(self, records: Iterable[PriceRecord]) -> int:
        """Merge ``records`` into the staged map. Returns entries changed."""
        if self._status.is_terminal:
            raise BatchClosedError(f"Batch {self._batch_id} is already {self._status.value}")
        changed = merge_into(self._staged, records)
        self.transition(BatchStatus.IN_PROGRESS)
        return changed

    def __len__(self) -> int:
        return len(self._staged)

    def __repr__(self) -> str:
        return f"Batch(batch_id={self._batch_id}, status={self._status.value}, staged={len(self._staged)})"
