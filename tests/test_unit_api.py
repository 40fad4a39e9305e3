"""
API tests for the canvas service.

Uses FastAPI's TestClient with the rule store, event bus and metadata
dependencies overridden (see conftest.py).

These tests verify:
- Health and metadata endpoints
- Connection validation, export, validation, save, delete and materialize routes
- Domain errors map to status codes with the {error, message, details} body
- The /metrics endpoint is token protected
"""

from unittest.mock import AsyncMock

import pytest

from rule_canvas.core.config import settings
from rule_canvas.core.notifications import RuleEventType
from rule_canvas.repos.rule_store import get_rule_store

API = "/api/v1"


# =============================================================================
# Health and metadata
# =============================================================================


class TestHealthAndMetadata:
    @pytest.mark.anyio
    async def test_health(self, client):
        """Test that the health endpoint reports ok."""
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["rule_store_backend"] == "memory"

    @pytest.mark.anyio
    async def test_request_id_echoed(self, client):
        """Test that the X-Request-ID header is echoed back."""
        response = client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.anyio
    async def test_metadata_catalog(self, client):
        """Test that the metadata endpoint serves the catalog."""
        response = client.get(f"{API}/metadata")
        assert response.status_code == 200
        body = response.json()
        assert "scheduled_time" in [t["type"] for t in body["triggers"]]
        assert "notification" in [a["type"] for a in body["actions"]]
        assert "isTrue" in [o["name"] for o in body["operators"]]


# =============================================================================
# Connections and export
# =============================================================================


class TestConnectionsAndExport:
    @pytest.mark.anyio
    async def test_validate_connection(self, client, high_temp_payload):
        """Test that connection validation reports the validator verdict."""
        high_temp_payload["connection"] = {"source": "rule-1", "target": "trigger-1"}
        response = client.post(f"{API}/canvas/connections/validate", json=high_temp_payload)
        assert response.status_code == 200
        assert response.json() == {"valid": False}

    @pytest.mark.anyio
    async def test_export_rule(self, client, high_temp_payload):
        """Test that a rule exports with its _ui layer."""
        response = client.post(
            f"{API}/canvas/rules/rule-1/export", json=high_temp_payload
        )
        assert response.status_code == 200
        body = response.json()
        assert body["trigger"] == {"type": "deviceData", "parameters": {"deviceId": "thermo-01"}}
        assert body["conditions"][1] == {"fact": "isSummer", "operator": "isTrue"}
        assert body["actions"][0]["parameters"] == {"to": "admin@example.com"}
        assert set(body["_ui"]["nodes"]) == {"rule-1", "trigger-1", "cond-1", "act-1"}

    @pytest.mark.anyio
    async def test_export_unknown_rule_is_404(self, client, high_temp_payload):
        """Test that exporting an unknown rule returns 404 with details."""
        response = client.post(f"{API}/canvas/rules/nope/export", json=high_temp_payload)
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "RuleNotFoundError"
        assert body["details"] == {"rule_id": "nope"}

    @pytest.mark.anyio
    async def test_bulk_export(self, client, high_temp_payload):
        """Test that bulk export returns one record per rule."""
        response = client.post(f"{API}/canvas/export", json=high_temp_payload)
        assert response.status_code == 200
        records = response.json()
        assert [r["id"] for r in records] == ["rule-1"]
        assert records[0]["triggerType"] == "deviceData"


# =============================================================================
# Validate and save
# =============================================================================


class TestValidateAndSave:
    @pytest.mark.anyio
    async def test_validate_complete_rule(self, client, scheduled_payload):
        """Test that a fully wired rule validates and can be saved."""
        response = client.post(
            f"{API}/canvas/rules/rule-9/validate", json=scheduled_payload
        )
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["canSave"] is True
        assert body["connectedCounts"] == {"trigger": 1, "conditions": 1, "actions": 1}

    @pytest.mark.anyio
    async def test_validate_incomplete_rule(self, client, scheduled_payload):
        """Test that missing children are reported as topology errors."""
        scheduled_payload["edges"] = scheduled_payload["edges"][:1]
        response = client.post(f"{API}/canvas/rules/rule-9/validate", json=scheduled_payload)
        body = response.json()
        assert body["valid"] is False
        assert body["canSave"] is False
        assert [e["code"] for e in body["errors"]] == ["topology", "topology"]

    @pytest.mark.anyio
    async def test_save_creates_record(
        self, client, scheduled_payload, memory_store, recorded_events
    ):
        """Test that saving a new rule creates a store record."""
        response = client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["backendId"] == "1"
        assert body["state"] == "saved"
        rule = next(n for n in body["nodes"] if n["id"] == "rule-9")
        assert rule["data"]["saved"] is True
        assert rule["data"]["backendId"] == "1"

        records = await memory_store.list()
        assert records[0]["spec"]["name"] == "Weekly digest"
        assert [e.type for e in recorded_events.events] == [RuleEventType.RULE_SAVED]

    @pytest.mark.anyio
    async def test_save_returns_float_backend_id(self, client, scheduled_payload):
        """Test that a numeric id with a fraction from the store survives the response."""
        store = AsyncMock()
        store.list.return_value = []
        store.create.return_value = {"id": 2.5}
        client.app.dependency_overrides[get_rule_store] = lambda: store

        response = client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)

        assert response.status_code == 200
        assert response.json()["backendId"] == 2.5

    @pytest.mark.anyio
    async def test_save_with_backend_id_updates(self, client, scheduled_payload, memory_store):
        """Test that a supplied backend id updates the existing record."""
        created = await memory_store.create({"name": "old"})
        scheduled_payload["backendId"] = created["id"]

        response = client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)

        assert response.status_code == 200
        assert response.json()["backendId"] == created["id"]
        records = await memory_store.list()
        assert len(records) == 1
        assert records[0]["name"] == "Weekly digest"

    @pytest.mark.anyio
    async def test_save_invalid_rule_is_400(self, client, scheduled_payload, memory_store):
        """Test that saving an invalid rule returns 400."""
        scheduled_payload["nodes"][0]["data"]["name"] = ""
        response = client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["details"]["errors"][0]["code"] == "name"
        assert await memory_store.list() == []

    @pytest.mark.anyio
    async def test_save_update_of_missing_record_is_404(self, client, scheduled_payload):
        """Test that updating a record the store lacks returns 404."""
        scheduled_payload["backendId"] = "999"
        response = client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)
        assert response.status_code == 404


# =============================================================================
# Delete and materialize
# =============================================================================


class TestDeleteAndMaterialize:
    @pytest.mark.anyio
    async def test_delete(self, client, memory_store, recorded_events):
        """Test that deleting a saved record removes it from the store."""
        created = await memory_store.create({"name": "x"})
        response = client.delete(f"{API}/canvas/rules/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"backendId": created["id"], "deleted": True}
        assert await memory_store.list() == []
        assert recorded_events.events[0].type == RuleEventType.RULE_DELETED

    @pytest.mark.anyio
    async def test_delete_blank_id_is_noop(self, client):
        """Test that a blank backend id skips the delete."""
        response = client.delete(f"{API}/canvas/rules/%20%20")
        assert response.status_code == 200
        assert response.json()["deleted"] is False

    @pytest.mark.anyio
    async def test_materialize_from_store_after_save(self, client, scheduled_payload):
        """Test that a saved rule is rebuilt from the store."""
        client.post(f"{API}/canvas/rules/rule-9/save", json=scheduled_payload)

        response = client.get(f"{API}/canvas/materialize")

        assert response.status_code == 200
        graph = response.json()
        assert {n["id"] for n in graph["nodes"]} == {"rule-9", "trigger-9", "cond-9", "act-9"}
        rule = next(n for n in graph["nodes"] if n["id"] == "rule-9")
        assert rule["data"]["saved"] is True
        assert len(graph["edges"]) == 3

    @pytest.mark.anyio
    async def test_materialize_supplied_records(self, client, high_temp_payload):
        """Test that records in the request body are materialized."""
        records = client.post(f"{API}/canvas/export", json=high_temp_payload).json()
        response = client.post(f"{API}/canvas/materialize", json={"records": records})
        assert response.status_code == 200
        assert len(response.json()["nodes"]) == 4


class TestVisibleKeys:
    @pytest.mark.anyio
    async def test_scheduled_time_keys(self, client):
        """Test that visible keys follow the schedule frequency."""
        response = client.post(
            f"{API}/canvas/triggers/visible-keys",
            json={"triggerType": "scheduled_time", "parameters": [{"key": "frequency",
                                                                   "value": "cron"}]},
        )
        assert response.json() == {
            "triggerType": "scheduled_time",
            "keys": ["cron_expression", "frequency", "timezone"],
        }


# =============================================================================
# Metrics endpoint
# =============================================================================


class TestMetricsEndpoint:
    @pytest.mark.anyio
    async def test_not_configured_is_500(self, client, monkeypatch):
        """Test that /metrics fails when no token is configured."""
        monkeypatch.setattr(settings, "metrics_token", None)
        response = client.get("/metrics")
        assert response.status_code == 500

    @pytest.mark.anyio
    async def test_wrong_token_is_403(self, client, monkeypatch):
        """Test that a wrong metrics token is rejected."""
        monkeypatch.setattr(settings, "metrics_token", "secret")
        response = client.get("/metrics", headers={"X-Metrics-Token": "nope"})
        assert response.status_code == 403
        assert response.json()["error"] == "HTTPException"

    @pytest.mark.anyio
    async def test_valid_token(self, client, monkeypatch):
        """Test that the right metrics token returns Prometheus text."""
        monkeypatch.setattr(settings, "metrics_token", "secret")
        client.get(f"{API}/health")
        response = client.get("/metrics", headers={"X-Metrics-Token": "secret"})
        assert response.status_code == 200
        assert "http_requests_total" in response.text
