"""Latest-wins selection shared by staging and commit."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping

from .models import PriceRecord


def select_latest(existing: PriceRecord, incoming: PriceRecord) -> PriceRecord:
    """Pick the record with the strictly later ``as_of``.

    Equal timestamps keep ``existing``. This keep-first policy applies both
    within a batch and when promoting staged records over committed ones.
    """
    return incoming if incoming.is_newer_than(existing) else existing


def merge_into(target: MutableMapping[str, PriceRecord], records: Iterable[PriceRecord]) -> int:
    """Merge ``records`` into ``target`` keyed by instrument id.

    Winners are resolved into a local dict first and applied with a single
    ``update``, so a failure while comparing leaves ``target`` untouched.
    Returns the number of entries that were inserted or replaced.
    """
    winners: dict[str, PriceRecord] = {}
    for record in records:
        current = winners.get(record.instrument_id)
        if current is None:
            current = target.get(record.instrument_id)
        winner = record if current is None else select_latest(current, record)
        if winner is not current:
            winners[record.instrument_id] = winner
    target.update(winners)
    return len(winners)
