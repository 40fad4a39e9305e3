"""API route serving the rules metadata catalog to the canvas."""

from fastapi import APIRouter

from rule_canvas.core.dependencies import MetadataDep
from rule_canvas.domain.metadata import RulesMetadata

router = APIRouter(tags=["metadata"])


@router.get("/metadata")
async def get_rules_metadata(metadata: MetadataDep) -> RulesMetadata:
    """Triggers, actions, facts and operators available to rule editors."""
    return metadata
