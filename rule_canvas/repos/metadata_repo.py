"""
Rule metadata provider.

Returns the trigger/action/fact/operator catalog that drives the node
editors, either the built-in catalog or the one served by the rules engine
at ``{RULE_STORE_URL}/api/rules/metadata``.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from rule_canvas.core.config import MetadataSource, settings
from rule_canvas.core.errors import RuleStoreError
from rule_canvas.domain.catalog import builtin_metadata
from rule_canvas.domain.metadata import RulesMetadata

logger = logging.getLogger(__name__)

METADATA_PATH = "/api/rules/metadata"


def parse_metadata_payload(payload: Any) -> RulesMetadata:
    """Accept the catalog itself or the ``{"status": ..., "data": {...}}`` envelope."""
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
        payload = payload["data"]
    if not isinstance(payload, Mapping):
        raise RuleStoreError("Rule metadata payload is not an object")
    return RulesMetadata.model_validate(
        {k: v or [] for k, v in payload.items() if k in RulesMetadata.model_fields}
    )


async def fetch_remote_metadata(
    base_url: str, timeout_s: float = 10.0, transport: httpx.AsyncBaseTransport | None = None
) -> RulesMetadata:
    try:
        async with httpx.AsyncClient(
            base_url=base_url, timeout=timeout_s, transport=transport
        ) as client:
            response = await client.get(METADATA_PATH)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPError as e:
        logger.error(f"Rule metadata fetch failed: {type(e).__name__}")
        raise RuleStoreError(
            "Rule metadata fetch failed", details={"error": str(e) or type(e).__name__}
        ) from e
    except ValueError as e:
        raise RuleStoreError("Rule metadata response is not JSON") from e
    return parse_metadata_payload(payload)


async def load_metadata(transport: httpx.AsyncBaseTransport | None = None) -> RulesMetadata:
    """Catalog selected by ``RULE_METADATA_SOURCE``."""
    if settings.rule_metadata_source == MetadataSource.HTTP:
        return await fetch_remote_metadata(
            settings.rule_store_url, settings.rule_store_timeout_s, transport=transport
        )
    return builtin_metadata()
