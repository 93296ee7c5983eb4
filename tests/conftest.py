from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fleetcache.core.errors import HistoryWriteError, ProviderError
from fleetcache.stores.memory import InMemoryPositionStore


class FakeProvider:
    provider_name = "fake"

    def __init__(self, rows=None, error: Exception | None = None) -> None:
        self.rows = list(rows or [])
        self.error = error
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.rows)


class HistoryFailingStore(InMemoryPositionStore):
    async def append_history(self, entries):
        raise HistoryWriteError("log table unavailable")


class UpsertFailingStore(InMemoryPositionStore):
    def __init__(self) -> None:
        super().__init__()
        self.history_calls = 0

    async def upsert_positions(self, positions):
        raise RuntimeError("connection reset")

    async def append_history(self, entries):
        self.history_calls += 1
        await super().append_history(entries)


def row(name: str, lat_mdeg: int, lng_mdeg: int, **extra: str) -> dict[str, str]:
    r = {
        "objectname": name,
        "latitude_mdeg": str(lat_mdeg),
        "longitude_mdeg": str(lng_mdeg),
    }
    r.update(extra)
    return r


def fixed_clock() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryPositionStore:
    return InMemoryPositionStore()


@pytest.fixture
def provider_error() -> ProviderError:
    return ProviderError("Webfleet HTTP 503: down", status_code=503)
