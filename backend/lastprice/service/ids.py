"""Batch id sources."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from threading import Lock
from uuid import UUID

BatchIdSource = Callable[[], UUID]


class SequentialIdSource:
    """Deterministic id source: UUIDs built from a counter.

    Handy in tests and replays where batch ids must be predictable.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = Lock()

    def __call__(self) -> UUID:
        with self._lock:
            return UUID(int=next(self._counter))
