"""
Pytest configuration and shared fixtures for unit tests.

Provides:
- Environment defaults (memory rule store, tracing off) set before any import
- AnyIO backend selection
- Canvas graph factories (the "High Temp Alert" star and a catalog-backed rule)
- Built-in rules metadata catalog
- In-memory rule store and a FastAPI TestClient wired to it
"""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add project root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# NOTE: Tests do NOT auto-discover or default-load any .env files.
# If you want to use an env file locally, set ENV_FILE explicitly.
_explicit_env_file = os.environ.get("ENV_FILE", "").strip()
if _explicit_env_file:
    from rule_canvas.core.dotenv import load_env_file

    load_env_file(_explicit_env_file, overwrite=False)

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("RULE_STORE_BACKEND", "memory")
os.environ.setdefault("RULE_METADATA_SOURCE", "builtin")
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")

import pytest  # noqa: E402 (import after path setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after path setup)

from rule_canvas.core.dependencies import get_event_bus, get_metadata  # noqa: E402
from rule_canvas.core.notifications import RuleEvent, RuleEventBus  # noqa: E402
from rule_canvas.domain.catalog import builtin_metadata  # noqa: E402
from rule_canvas.domain.metadata import RulesMetadata  # noqa: E402
from rule_canvas.graph.model import RuleGraph  # noqa: E402
from rule_canvas.repos.rule_store import InMemoryRuleStore, get_rule_store  # noqa: E402


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Graph factories
# =============================================================================


def high_temp_alert_payload() -> dict[str, Any]:
    """Canvas wire payload of a complete rule with one blank-key action parameter."""
    return {
        "nodes": [
            {
                "id": "rule-1",
                "type": "rule",
                "position": {"x": 0, "y": 0},
                "data": {"label": "High Temp Alert", "name": "High Temp Alert", "saved": False},
            },
            {
                "id": "trigger-1",
                "type": "trigger",
                "position": {"x": -200, "y": 0},
                "data": {
                    "label": "Trigger",
                    "triggerType": "deviceData",
                    "parameters": [{"key": "deviceId", "value": "thermo-01"}],
                },
            },
            {
                "id": "cond-1",
                "type": "conditions",
                "position": {"x": 0, "y": 150},
                "data": {
                    "label": "Conditions",
                    "conditions": [
                        {"fact": "temperature", "operator": "greaterThan", "value": "30"},
                        {"fact": "isSummer", "operator": "isTrue", "value": ""},
                    ],
                },
            },
            {
                "id": "act-1",
                "type": "actions",
                "position": {"x": 200, "y": 0},
                "data": {
                    "label": "Actions",
                    "actions": [
                        {
                            "type": "sendEmail",
                            "parameters": [
                                {"key": "to", "value": "admin@example.com"},
                                {"key": "", "value": "ignored"},
                            ],
                        }
                    ],
                },
            },
        ],
        "edges": [
            {"id": "e1", "source": "trigger-1", "target": "rule-1"},
            {"id": "e2", "source": "rule-1", "target": "cond-1"},
            {"id": "e3", "source": "rule-1", "target": "act-1"},
        ],
    }


def scheduled_rule_payload() -> dict[str, Any]:
    """A rule built only from catalog types (scheduled_time trigger, notification action)."""
    return {
        "nodes": [
            {
                "id": "rule-9",
                "type": "rule",
                "position": {"x": 10, "y": 10},
                "data": {"label": "Weekly digest", "name": "Weekly digest"},
            },
            {
                "id": "trigger-9",
                "type": "trigger",
                "position": {"x": -150, "y": 10},
                "data": {
                    "triggerType": "scheduled_time",
                    "parameters": [
                        {"key": "frequency", "value": "weekly"},
                        {"key": "day_of_week", "value": "monday"},
                        {"key": "time_of_day", "value": "09:00"},
                        {"key": "timezone", "value": "UTC"},
                    ],
                },
            },
            {
                "id": "cond-9",
                "type": "conditions",
                "position": {"x": 10, "y": 160},
                "data": {"conditions": []},
            },
            {
                "id": "act-9",
                "type": "actions",
                "position": {"x": 160, "y": 10},
                "data": {
                    "actions": [
                        {
                            "type": "notification",
                            "parameters": [
                                {"key": "type", "value": "email"},
                                {"key": "recipients", "value": "ops@example.com"},
                                {"key": "subject", "value": "Digest"},
                                {"key": "message", "value": "Weekly summary"},
                            ],
                        }
                    ]
                },
            },
        ],
        "edges": [
            {"id": "t9", "source": "trigger-9", "target": "rule-9"},
            {"id": "c9", "source": "rule-9", "target": "cond-9"},
            {"id": "a9", "source": "act-9", "target": "rule-9"},
        ],
    }


@pytest.fixture
def high_temp_payload() -> dict[str, Any]:
    return high_temp_alert_payload()


@pytest.fixture
def scheduled_payload() -> dict[str, Any]:
    return scheduled_rule_payload()


@pytest.fixture
def high_temp_graph() -> RuleGraph:
    return RuleGraph.model_validate(high_temp_alert_payload())


@pytest.fixture
def scheduled_graph() -> RuleGraph:
    return RuleGraph.model_validate(scheduled_rule_payload())


@pytest.fixture
def metadata() -> RulesMetadata:
    return builtin_metadata()


# =============================================================================
# Store, event bus and API client
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryRuleStore:
    return InMemoryRuleStore()


class RecordingListener:
    """Event listener that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[RuleEvent] = []

    def __call__(self, event: RuleEvent) -> None:
        self.events.append(event)


@pytest.fixture
def recorded_events() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def event_bus(recorded_events: RecordingListener) -> RuleEventBus:
    return RuleEventBus([recorded_events])


@pytest.fixture
def client(
    memory_store: InMemoryRuleStore, event_bus: RuleEventBus
) -> Generator[TestClient]:
    from rule_canvas.main import create_app

    app = create_app()
    app.dependency_overrides[get_rule_store] = lambda: memory_store
    app.dependency_overrides[get_event_bus] = lambda: event_bus
    app.dependency_overrides[get_metadata] = builtin_metadata
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
