"""
Tests for the rule event bus.
"""

import logging

import pytest

from rule_canvas.core.notifications import (
    RuleEvent,
    RuleEventBus,
    RuleEventType,
    default_event_bus,
)


def _event(backend_id="1"):
    return RuleEvent(type=RuleEventType.RULE_SAVED, backend_id=backend_id, rule_id="rule-1")


class TestRuleEventBus:
    @pytest.mark.anyio
    async def test_listeners_run_in_order(self):
        """Test that listeners run in subscription order."""
        calls = []
        bus = RuleEventBus([lambda e: calls.append(("a", e.backend_id))])
        bus.subscribe(lambda e: calls.append(("b", e.backend_id)))

        bus.publish(_event("7"))

        assert calls == [("a", "7"), ("b", "7")]

    @pytest.mark.anyio
    async def test_unsubscribe(self):
        """Test that unsubscribing twice is harmless."""
        calls = []
        bus = RuleEventBus()
        unsubscribe = bus.subscribe(calls.append)
        unsubscribe()
        unsubscribe()

        bus.publish(_event())

        assert calls == []

    @pytest.mark.anyio
    async def test_failing_listener_does_not_stop_others(self, caplog):
        """Test that a failing listener is logged and others still run."""
        calls = []

        def broken(event):
            raise RuntimeError("listener bug")

        bus = RuleEventBus([broken, calls.append])
        with caplog.at_level(logging.ERROR, logger="rule_canvas.core.notifications"):
            bus.publish(_event())

        assert len(calls) == 1
        assert "Rule event listener failed" in caplog.text

    @pytest.mark.anyio
    async def test_default_bus_logs_event(self, caplog):
        """Test that the default bus logs each event."""
        with caplog.at_level(logging.INFO, logger="rule_canvas.core.notifications"):
            default_event_bus().publish(_event("42"))
        assert "notify:rule.saved" in caplog.text
