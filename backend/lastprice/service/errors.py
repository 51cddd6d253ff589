"""Error taxonomy for the last value price service."""

from __future__ import annotations


class PriceServiceError(Exception):
    """Base class for every error raised by the price service."""


class ValidationError(PriceServiceError, ValueError):
    """Malformed input: oversize chunk, foreign batch id, incomplete record."""


class ConflictError(PriceServiceError):
    """The active-batch slot is already held by a non-terminal batch."""


class StateError(PriceServiceError, RuntimeError):
    """The operation targets a batch that cannot accept it."""


class NotFoundError(StateError):
    """No batch is currently active."""


class BatchClosedError(StateError):
    """The batch has already been completed or cancelled."""
