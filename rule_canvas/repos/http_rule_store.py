"""
HTTP adapter for the remote rules engine.

Talks to ``{RULE_STORE_URL}/api/rules/rules``:

    GET    /api/rules/rules        list records
    POST   /api/rules/rules        create, responds with {"id": ...}
    PUT    /api/rules/rules/{id}   replace spec
    DELETE /api/rules/rules/{id}   delete

Transport failures and non-2xx responses raise RuleStoreError. No retries.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from rule_canvas.core.errors import RuleStoreError
from rule_canvas.core.observability import store_metrics
from rule_canvas.repos.rule_store import normalize_rule_records

logger = logging.getLogger(__name__)

RULES_PATH = "/api/rules/rules"


def _extract_id(payload: Any) -> str | int | None:
    """Find the assigned id in a create response (flat or wrapped in data/rule)."""
    if not isinstance(payload, Mapping):
        return None
    if payload.get("id") not in (None, ""):
        return payload["id"]
    for key in ("data", "rule"):
        nested = payload.get(key)
        if isinstance(nested, Mapping) and nested.get("id") not in (None, ""):
            return nested["id"]
    return None


class HttpRuleStore:
    """Rule store backed by the rules engine REST API."""

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout_s)
        self._transport = transport
        self._headers = headers or {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers=self._headers,
        )

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        with store_metrics.track(operation):
            try:
                async with self._client() as client:
                    response = await client.request(method, path, **kwargs)
                    response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Rule store {operation} failed: {e.response.status_code}",
                    extra={"operation": operation, "status_code": e.response.status_code},
                )
                raise RuleStoreError(
                    f"Rule store {operation} failed",
                    details={
                        "operation": operation,
                        "status_code": e.response.status_code,
                        "body": e.response.text[:500],
                    },
                ) from e
            except httpx.HTTPError as e:
                logger.error(
                    f"Rule store {operation} failed: {type(e).__name__}",
                    extra={"operation": operation},
                )
                raise RuleStoreError(
                    f"Rule store {operation} failed",
                    details={"operation": operation, "error": str(e) or type(e).__name__},
                ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RuleStoreError(
                f"Rule store {operation} returned invalid JSON",
                details={"operation": operation},
            ) from e

    async def list(self) -> list[dict[str, Any]]:
        payload = await self._request("list", "GET", RULES_PATH)
        return normalize_rule_records(payload)

    async def create(self, spec: dict[str, Any]) -> dict[str, Any]:
        payload = await self._request("create", "POST", RULES_PATH, json=spec)
        rule_id = _extract_id(payload)
        if rule_id is None:
            raise RuleStoreError(
                "Rule store create response carried no id",
                details={"operation": "create"},
            )
        return {"id": rule_id}

    async def update(self, rule_id: str, spec: dict[str, Any]) -> None:
        await self._request("update", "PUT", f"{RULES_PATH}/{rule_id}", json=spec)

    async def delete(self, rule_id: str) -> None:
        await self._request("delete", "DELETE", f"{RULES_PATH}/{rule_id}")
