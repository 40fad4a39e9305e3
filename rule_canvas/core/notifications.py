"""Rule event notifications.

Cross-component notifications ("rule saved", "rule deleted") are published on
an explicit ``RuleEventBus`` that callers pass to the sync layer. Listeners such
as a rule library view subscribe to it directly. The default bus has a single
subscriber that emits a structured log line per event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class RuleEventType(str, Enum):
    RULE_SAVED = "rule.saved"
    RULE_DELETED = "rule.deleted"


@dataclass(frozen=True)
class RuleEvent:
    """One notification. ``rule_id`` is the canvas node id when known."""

    type: RuleEventType
    backend_id: str | int | float | None
    rule_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


RuleEventListener = Callable[[RuleEvent], None]


def log_event(event: RuleEvent) -> None:
    """Emit a notification event as a structured log line."""

    logger.info(
        "notify:%s",
        event.type.value,
        extra={
            "rule_id": event.rule_id,
            "backend_id": event.backend_id,
            "details": event.details,
        },
    )


class RuleEventBus:
    """Synchronous publish/subscribe channel for rule events.

    Listeners run in subscription order inside ``publish``. A listener that
    raises is logged and skipped so one faulty observer cannot undo a
    completed backend write.
    """

    def __init__(self, listeners: list[RuleEventListener] | None = None) -> None:
        self._listeners: list[RuleEventListener] = list(listeners or [])

    def subscribe(self, listener: RuleEventListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: RuleEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Rule event listener failed",
                    extra={"event_type": event.type.value, "listener": repr(listener)},
                )


def default_event_bus() -> RuleEventBus:
    return RuleEventBus([log_event])
