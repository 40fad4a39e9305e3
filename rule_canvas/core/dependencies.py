"""
FastAPI dependency injection utilities.

Provides the rule store, the rules metadata catalog and the rule event bus
to the API routes. Tests override these with ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from rule_canvas.core.notifications import RuleEventBus, default_event_bus
from rule_canvas.domain.metadata import RulesMetadata
from rule_canvas.repos.metadata_repo import load_metadata
from rule_canvas.repos.rule_store import RuleStore, get_rule_store

_event_bus: RuleEventBus | None = None


def get_event_bus() -> RuleEventBus:
    """Process-wide rule event bus; its default subscriber logs every event."""
    global _event_bus
    if _event_bus is None:
        _event_bus = default_event_bus()
    return _event_bus


async def get_metadata() -> RulesMetadata:
    return await load_metadata()


RuleStoreDep = Annotated[RuleStore, Depends(get_rule_store)]
MetadataDep = Annotated[RulesMetadata, Depends(get_metadata)]
EventBusDep = Annotated[RuleEventBus, Depends(get_event_bus)]
