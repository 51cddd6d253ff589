"""Thread-safe committed price store."""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock

from .merge import merge_into
from .models import PriceRecord


class CommittedPriceStore:
    """Consumer-visible mapping of instrument id to its latest committed price.

    Writer: the batch lifecycle manager, on batch completion only.
    Readers: any number of consumer threads, SSE stream, HTTP lookups.

    The store lock is independent of the lifecycle lock and is held only for
    single lookups or one whole-batch merge, so readers never wait on a batch
    in progress and never see a commit half applied.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceRecord] = {}
        self._lock = Lock()
        self._version: int = 0  # Bumped once per commit that changed something

    def merge(self, records: Iterable[PriceRecord]) -> int:
        """Merge a batch of records with latest-wins. Returns entries changed."""
        with self._lock:
            changed = merge_into(self._prices, records)
            if changed:
                self._version += 1
            return changed

    def get(self, instrument_id: str) -> PriceRecord | None:
        """Latest committed record for an instrument, or None if never committed."""
        with self._lock:
            return self._prices.get(instrument_id)

    def get_all(self) -> dict[str, PriceRecord]:
        """Snapshot of all committed prices. Returns a shallow copy."""
        with self._lock:
            return dict(self._prices)

    @property
    def version(self) -> int:
        """Current version counter. Useful for SSE change detection."""
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._prices)

    def __contains__(self, instrument_id: str) -> bool:
        with self._lock:
            return instrument_id in self._prices
