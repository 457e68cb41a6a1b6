"""Unit tests for the update API routes.

Runs the real application with an in-memory store and bus configured per
test through configure_update_dependencies().
"""

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies.update import (
    configure_update_dependencies,
    reset_update_dependencies,
)
from src.api.main import app
from src.config.update_config import PatchFieldPolicy, UpdateServiceConfig
from src.domain.models.update_record import UpdateEvent
from src.infrastructure.adapters.messaging.in_process_notification_bus import (
    InProcessNotificationBus,
)
from src.infrastructure.monitoring.metrics import reset_metrics_collector
from src.infrastructure.stubs.update_store_stub import UpdateStoreStub

SECRET = "s3cret"
AUTH = {"Authorization": SECRET}
MANIFEST = {"version": "1.0.0", "files": ["app.bin"]}


class _FailingBus(InProcessNotificationBus):
    async def publish(self, event: UpdateEvent) -> int:
        raise RuntimeError("bus down")


@pytest.fixture
def store() -> UpdateStoreStub:
    return UpdateStoreStub()


@pytest.fixture
def bus() -> InProcessNotificationBus:
    return InProcessNotificationBus()


@pytest.fixture(autouse=True)
def configured(
    store: UpdateStoreStub, bus: InProcessNotificationBus
) -> Iterator[None]:
    reset_update_dependencies()
    reset_metrics_collector()
    configure_update_dependencies(
        config=UpdateServiceConfig(internal_api_secret=SECRET),
        store=store,
        bus=bus,
    )
    yield
    reset_update_dependencies()
    reset_metrics_collector()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestCreateUpdate:
    """Tests for POST /update."""

    def test_create_returns_201_with_id(self, client: TestClient) -> None:
        response = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        assert response.status_code == 201
        assert response.json() == {"id": 1}

    def test_duplicate_returns_304_with_empty_body(
        self, client: TestClient, store: UpdateStoreStub
    ) -> None:
        client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        response = client.post(
            "/update",
            json={"commit": "abc123", "manifest": {"version": "2.0.0"}},
            headers=AUTH,
        )

        assert response.status_code == 304
        assert response.content == b""

    async def test_duplicate_keeps_original_manifest(
        self, client: TestClient, store: UpdateStoreStub
    ) -> None:
        for version in ("1.0.0", "2.0.0"):
            client.post(
                "/update",
                json={"commit": "abc123", "manifest": {"version": version}},
                headers=AUTH,
            )

        record = await store.find_by_commit("abc123")
        assert record is not None and record.manifest == {"version": "1.0.0"}
        assert await store.count() == 1

    def test_duplicate_returns_409_when_configured(
        self, client: TestClient
    ) -> None:
        configure_update_dependencies(
            config=UpdateServiceConfig(
                internal_api_secret=SECRET, duplicate_status_code=409
            )
        )
        client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        response = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["type"] == "urn:updates:error:duplicate-commit"
        assert detail["status"] == 409
        assert detail["instance"] == "/update"

    def test_empty_body_returns_400(
        self, client: TestClient
    ) -> None:
        response = client.post("/update", json={}, headers=AUTH)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["type"] == "urn:updates:error:invalid-update"
        assert "commit" in detail["detail"]

    def test_missing_manifest_returns_400(self, client: TestClient) -> None:
        response = client.post("/update", json={"commit": "abc123"}, headers=AUTH)

        assert response.status_code == 400

    def test_non_object_body_returns_400(self, client: TestClient) -> None:
        response = client.post("/update", json=["abc123"], headers=AUTH)

        assert response.status_code == 400
        assert response.json()["detail"]["type"] == "urn:updates:error:invalid-request"

    def test_missing_body_returns_400(self, client: TestClient) -> None:
        response = client.post("/update", headers=AUTH)

        assert response.status_code == 400

    async def test_missing_secret_returns_401(
        self, client: TestClient, store: UpdateStoreStub
    ) -> None:
        response = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}
        )

        assert response.status_code == 401
        assert response.json()["detail"]["type"] == "urn:updates:error:unauthorized"
        assert await store.count() == 0

    def test_wrong_secret_returns_401(self, client: TestClient) -> None:
        response = client.post(
            "/update",
            json={"commit": "abc123", "manifest": MANIFEST},
            headers={"Authorization": "nope"},
        )

        assert response.status_code == 401

    def test_no_secret_configured_accepts_requests(self, client: TestClient) -> None:
        configure_update_dependencies(config=UpdateServiceConfig())

        response = client.post("/update", json={"commit": "abc123", "manifest": MANIFEST})

        assert response.status_code == 201

    def test_storage_failure_returns_500(
        self, client: TestClient, store: UpdateStoreStub
    ) -> None:
        store.set_unavailable()

        response = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        assert response.status_code == 500
        assert response.json()["detail"]["type"] == "urn:updates:error:storage-unavailable"

    def test_created_event_published(
        self, client: TestClient, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()

        client.post(
            "/update", json={"commit": "xyz789", "manifest": MANIFEST}, headers=AUTH
        )
        client.post(
            "/update", json={"commit": "xyz789", "manifest": MANIFEST}, headers=AUTH
        )

        assert subscription.pending_count() == 1

    async def test_failing_bus_still_returns_201(self, store: UpdateStoreStub) -> None:
        configure_update_dependencies(
            config=UpdateServiceConfig(internal_api_secret=SECRET),
            store=store,
            bus=_FailingBus(),
        )
        client = TestClient(app, raise_server_exceptions=False)

        first = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )
        retry = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        assert first.status_code == 201
        assert first.json() == {"id": 1}
        assert retry.status_code == 304
        assert await store.count() == 1


class TestPatchUpdate:
    """Tests for PATCH /update."""

    @pytest.fixture(autouse=True)
    def existing(self, client: TestClient) -> None:
        response = client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )
        assert response.status_code == 201

    def test_patch_returns_200_with_record(self, client: TestClient) -> None:
        response = client.patch(
            "/update",
            json={"commit": "abc123", "channel": "general", "tainted": True},
            headers=AUTH,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 1
        assert body["commit"] == "abc123"
        assert body["channel"] == "general"
        assert body["tainted"] is True
        assert body["manifest"] == MANIFEST

    def test_patch_is_persisted(self, client: TestClient) -> None:
        client.patch(
            "/update", json={"commit": "abc123", "channel": "beta"}, headers=AUTH
        )

        response = client.get("/update/abc123")

        assert response.json()["channel"] == "beta"
        assert response.json()["tainted"] is False

    def test_patch_unknown_commit_returns_404(self, client: TestClient) -> None:
        response = client.patch(
            "/update", json={"commit": "missing", "tainted": True}, headers=AUTH
        )

        assert response.status_code == 404
        assert response.json()["detail"]["type"] == "urn:updates:error:update-not-found"

    def test_patch_without_commit_returns_400(self, client: TestClient) -> None:
        response = client.patch("/update", json={"tainted": True}, headers=AUTH)

        assert response.status_code == 400

    def test_patch_bad_type_returns_400(self, client: TestClient) -> None:
        response = client.patch(
            "/update", json={"commit": "abc123", "tainted": "yes"}, headers=AUTH
        )

        assert response.status_code == 400
        assert response.json()["detail"]["type"] == "urn:updates:error:invalid-patch"

    def test_patch_ignores_manifest_by_default(self, client: TestClient) -> None:
        response = client.patch(
            "/update",
            json={"commit": "abc123", "manifest": {"version": "evil"}, "tainted": True},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["manifest"] == MANIFEST

    def test_patch_rejects_manifest_when_configured(self, client: TestClient) -> None:
        configure_update_dependencies(
            config=UpdateServiceConfig(
                internal_api_secret=SECRET,
                patch_field_policy=PatchFieldPolicy.REJECT,
            )
        )

        response = client.patch(
            "/update",
            json={"commit": "abc123", "manifest": {"version": "evil"}},
            headers=AUTH,
        )

        assert response.status_code == 400

    def test_patch_requires_secret(self, client: TestClient) -> None:
        response = client.patch("/update", json={"commit": "abc123", "tainted": True})

        assert response.status_code == 401


class TestGetUpdate:
    """Tests for GET /update/{commit}."""

    def test_get_existing(self, client: TestClient) -> None:
        client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        response = client.get("/update/abc123")

        assert response.status_code == 200
        assert response.json()["id"] == 1

    def test_get_missing_returns_404(self, client: TestClient) -> None:
        assert client.get("/update/missing").status_code == 404

    def test_query_lookup_reaches_commit_named_events(self, client: TestClient) -> None:
        client.post(
            "/update", json={"commit": "events", "manifest": MANIFEST}, headers=AUTH
        )

        response = client.get("/update", params={"commit": "events"})

        assert response.status_code == 200
        assert response.json()["commit"] == "events"
        assert response.json()["id"] == 1

    def test_query_lookup_missing_returns_404(self, client: TestClient) -> None:
        response = client.get("/update", params={"commit": "missing"})

        assert response.status_code == 404
        assert response.json()["detail"]["type"] == "urn:updates:error:update-not-found"

    def test_query_lookup_without_commit_returns_400(self, client: TestClient) -> None:
        assert client.get("/update").status_code == 400


class TestOperationalEndpoints:
    """Tests for health, metrics and correlation headers."""

    def test_health(self, client: TestClient, bus: InProcessNotificationBus) -> None:
        bus.subscribe()

        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "subscribers": 1}

    def test_metrics_include_update_counters(self, client: TestClient) -> None:
        client.post(
            "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
        )

        response = client.get("/v1/metrics")

        assert response.status_code == 200
        assert "update_creations_total" in response.text
        assert 'outcome="created"' in response.text

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={"X-Correlation-ID": "corr-123"})

        assert response.headers["X-Correlation-ID"] == "corr-123"


class TestEndToEndScenario:
    """The full create/duplicate/notify/patch sequence over one event loop."""

    async def test_scenario(self, bus: InProcessNotificationBus) -> None:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as client:
            first = await client.post(
                "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
            )
            assert first.status_code == 201
            assert first.json() == {"id": 1}

            repeat = await client.post(
                "/update", json={"commit": "abc123", "manifest": MANIFEST}, headers=AUTH
            )
            assert repeat.status_code == 304

            subscription = bus.subscribe()
            second = await client.post(
                "/update", json={"commit": "xyz789", "manifest": MANIFEST}, headers=AUTH
            )
            assert second.status_code == 201
            assert second.json() == {"id": 2}

            # Delivered before the response was returned
            assert subscription.pending_count() == 1
            event = await subscription.next_event(timeout=1)
            assert event is not None
            assert event.event_type.value == "created"
            assert event.record.commit == "xyz789"
            assert event.record.manifest == MANIFEST
            assert await subscription.next_event(timeout=0.01) is None

            patched = await client.patch(
                "/update",
                json={"commit": "xyz789", "channel": "general", "tainted": True},
                headers=AUTH,
            )
            assert patched.status_code == 200
            assert patched.json()["channel"] == "general"
            assert patched.json()["tainted"] is True
            subscription.close()
