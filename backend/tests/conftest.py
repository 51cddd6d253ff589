"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _debug_service_logs(caplog):
    """Capture lastprice debug output so failing tests show the batch trail."""
    caplog.set_level(logging.DEBUG, logger="lastprice")
    yield
