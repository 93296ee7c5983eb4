"""
HTTP surface: collection trigger and cached vehicle lookup.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider, UpsertFailingStore, row
from fleetcache.api.app import create_app
from fleetcache.core.config import Settings
from fleetcache.core.errors import ProviderError
from fleetcache.core.services import Services
from fleetcache.stores.memory import InMemoryPositionStore

SECRET = "s3cret"


def _client(provider, store, cron_secret: str = SECRET) -> TestClient:
    app = create_app(
        services=Services(provider=provider, store=store),
        settings=Settings(cron_secret=cron_secret),
    )
    return TestClient(app)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider([row("A", 51000000, 0, speed="10"), row("B", 52000000, 0), row("A", 51500000, 0, speed="20")])


class TestCollectTrigger:
    def test_missing_credential_rejected_before_fetch(self, provider, store):
        response = _client(provider, store).get("/api/cron/collect-vehicles")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert provider.calls == 0

    def test_wrong_credential_rejected_before_fetch(self, provider, store):
        response = _client(provider, store).get(
            "/api/cron/collect-vehicles", headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401
        assert provider.calls == 0

    def test_no_secret_configured_allows_call(self, provider, store):
        response = _client(provider, store, cron_secret="").get("/api/cron/collect-vehicles")

        assert response.status_code == 200
        assert provider.calls == 1

    def test_success_payload(self, provider, store):
        response = _client(provider, store).get(
            "/api/cron/collect-vehicles", headers={"Authorization": f"Bearer {SECRET}"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["upserted"] == 2
        assert data["vehicleNames"] == ["A", "B"]
        assert isinstance(data["durationMs"], int)
        assert store.positions()["A"].speed_kph == 20

    def test_zero_rows_payload(self, store):
        response = _client(FakeProvider([]), store).get(
            "/api/cron/collect-vehicles", headers={"Authorization": f"Bearer {SECRET}"}
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "message": "No vehicles returned from provider", "upserted": 0}

    def test_provider_failure_is_500(self, store):
        failing = FakeProvider(error=ProviderError("Webfleet HTTP 401: bad key", status_code=401))

        response = _client(failing, store).get(
            "/api/cron/collect-vehicles", headers={"Authorization": f"Bearer {SECRET}"}
        )

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "Webfleet HTTP 401: bad key"}

    def test_store_failure_is_500(self, provider):
        response = _client(provider, UpsertFailingStore()).get(
            "/api/cron/collect-vehicles", headers={"Authorization": f"Bearer {SECRET}"}
        )

        assert response.status_code == 500
        assert response.json()["ok"] is False


class TestVehicleLookup:
    @pytest.fixture
    def client(self, provider) -> TestClient:
        store = InMemoryPositionStore()
        client = _client(provider, store)
        client.get("/api/cron/collect-vehicles", headers={"Authorization": f"Bearer {SECRET}"})
        return client

    def test_missing_parameter_is_400(self, client):
        response = client.get("/api/webfleet/vehicle")

        assert response.status_code == 400
        assert response.json()["ok"] is False

    def test_exact_match(self, client):
        response = client.get("/api/webfleet/vehicle", params={"vehicle": " a "})

        assert response.status_code == 200
        data = response.json()
        assert data["vehicle"] == "A"
        assert data["lat"] == pytest.approx(51.5)
        assert data["speedKph"] == 20
        assert "heading" not in data
        assert data["timestamp"] == data["cachedAt"]

    def test_not_found_echoes_normalized_query(self, client):
        response = client.get("/api/webfleet/vehicle", params={"vehicle": "zz 1"})

        assert response.status_code == 404
        data = response.json()
        assert data["ok"] is False
        assert data["query"] == "ZZ1"
        assert "collector" in data["error"]
