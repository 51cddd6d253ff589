"""Tests for the SSE event generator."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from lastprice.service.store import CommittedPriceStore
from lastprice.service.stream import _changed, _generate_events, create_stream_router


def _request(disconnect_after: int, on_check=None) -> MagicMock:
    """Mock request that reports a disconnect after N checks.

    ``on_check(n)`` runs before the n-th check, letting a test commit
    between polls.
    """
    request = MagicMock()
    request.client.host = "127.0.0.1"
    calls = {"n": 0}

    async def is_disconnected():
        calls["n"] += 1
        if on_check is not None:
            on_check(calls["n"])
        return calls["n"] > disconnect_after

    request.is_disconnected = AsyncMock(side_effect=is_disconnected)
    return request


def _parse(event: str) -> tuple[str, int, dict]:
    fields = dict(line.split(": ", 1) for line in event.strip().splitlines())
    return fields["event"], int(fields["id"]), json.loads(fields["data"])


@pytest.mark.asyncio
class TestGenerateEvents:
    """Unit tests for _generate_events."""

    async def test_emits_retry_then_snapshot(self, make_price):
        store = CommittedPriceStore()
        store.merge([make_price("AAPL", 10, 150.25)])

        events = [e async for e in _generate_events(store, _request(1), interval=0)]

        assert events[0] == "retry: 1000\n\n"
        assert len(events) == 2
        name, version, data = _parse(events[1])
        assert name == "snapshot"
        assert version == store.version
        assert data["AAPL"]["payload"] == 150.25

    async def test_empty_store_sends_empty_snapshot(self):
        store = CommittedPriceStore()

        events = [e async for e in _generate_events(store, _request(2), interval=0)]

        assert len(events) == 2
        assert _parse(events[1])[::2] == ("snapshot", {})

    async def test_unchanged_version_not_resent(self, make_price):
        store = CommittedPriceStore()
        store.merge([make_price("AAPL", 10, 1.0)])

        events = [e async for e in _generate_events(store, _request(3), interval=0)]

        assert sum(e.startswith("event:") for e in events) == 1

    async def test_commit_event_carries_only_changed_instruments(self, make_price):
        store = CommittedPriceStore()
        store.merge([make_price("AAPL", 10, 1.0), make_price("IBM", 10, 2.0)])

        def commit_on_second_check(n):
            if n == 2:
                store.merge([make_price("IBM", 11, 3.0), make_price("MSFT", 11, 4.0)])

        events = [
            e async for e in _generate_events(store, _request(2, commit_on_second_check), interval=0)
        ]

        name, version, data = _parse(events[-1])
        assert name == "commit"
        assert version == store.version
        assert set(data) == {"IBM", "MSFT"}
        assert data["IBM"]["payload"] == 3.0


class TestChanged:
    def test_new_and_replaced_entries(self, make_price):
        aapl = make_price("AAPL", 10, 1.0)
        previous = {"AAPL": aapl, "IBM": make_price("IBM", 10, 2.0)}
        current = {"AAPL": aapl, "IBM": make_price("IBM", 11, 3.0), "MSFT": make_price("MSFT", 9, 4.0)}

        assert set(_changed(previous, current)) == {"IBM", "MSFT"}

    def test_identical_maps(self, make_price):
        snapshot = {"AAPL": make_price("AAPL", 10, 1.0)}
        assert _changed(snapshot, dict(snapshot)) == {}


class TestStreamRouter:
    def test_router_exposes_prices_route(self):
        router = create_stream_router(CommittedPriceStore())
        assert "/api/stream/prices" in [route.path for route in router.routes]
