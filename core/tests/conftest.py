"""Shared fixtures for the stepflow test-suite."""

from unittest.mock import AsyncMock

import pytest

from stepflow.observability import clear_trace_context


@pytest.fixture(autouse=True)
def fast_sleep(monkeypatch):
    """Mock asyncio.sleep to avoid real delays from exponential backoff."""
    sleep = AsyncMock()
    monkeypatch.setattr("asyncio.sleep", sleep)
    return sleep


@pytest.fixture(autouse=True)
def _reset_trace_context():
    yield
    clear_trace_context()
