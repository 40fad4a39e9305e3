"""
Remote rule store interface and the process-local implementation.

Every store speaks the same four operations:

    list()            -> [PersistedRuleRecord]
    create(spec)      -> {"id": ...}
    update(id, spec)  -> None
    delete(id)        -> None

where ``PersistedRuleRecord = {id, name, triggerType, enabled, spec, ...}``
and ``spec`` is a RuleV2WithUI document.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Protocol

from rule_canvas.core.config import RuleStoreBackend, settings
from rule_canvas.core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RuleStore(Protocol):
    async def list(self) -> list[dict[str, Any]]: ...

    async def create(self, spec: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, rule_id: str, spec: dict[str, Any]) -> None: ...

    async def delete(self, rule_id: str) -> None: ...


def _trigger_type(spec: Mapping[str, Any]) -> str:
    trigger = spec.get("trigger")
    if isinstance(trigger, Mapping) and isinstance(trigger.get("type"), str):
        return trigger["type"]
    return ""


def build_record(
    rule_id: str | int, spec: dict[str, Any], created_at: str | None = None
) -> dict[str, Any]:
    """Wrap a spec into a stored record; ``createdAt`` is kept when given."""
    now = datetime.now(UTC).isoformat()
    return {
        "id": rule_id,
        "name": spec.get("name") or "",
        "triggerType": _trigger_type(spec),
        "enabled": True,
        "spec": spec,
        "createdAt": created_at or now,
        "updatedAt": now,
    }


def normalize_rule_records(payload: Any) -> list[dict[str, Any]]:
    """
    Normalize a rule list payload into PersistedRuleRecords.

    Accepted shapes: a raw array, ``{"rules": [...]}`` or ``{"data": [...]}``.
    Items either wrap their rule in ``spec`` or are a bare rule
    (``name``/``trigger`` at top level). Items without an id get
    ``str(index + 1)``. Items with neither shape are dropped. Any other
    payload yields an empty list.

    Example:
        >>> normalize_rule_records({"rules": [{"id": 7, "spec": {"name": "A"}}]})[0]["id"]
        7
    """
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, Mapping) and isinstance(payload.get("rules"), list):
        items = payload["rules"]
    elif isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        items = payload["data"]
    else:
        return []

    records = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            continue
        if isinstance(item.get("spec"), Mapping):
            spec = dict(item["spec"])
        elif "name" in item or "trigger" in item:
            spec = dict(item)
        else:
            continue

        rule_id = item.get("id")
        if rule_id is None or rule_id == "":
            rule_id = str(index + 1)

        record = dict(item)
        record.update(
            {
                "id": rule_id,
                "name": item.get("name") or spec.get("name") or "",
                "enabled": item.get("enabled", True),
                "triggerType": _trigger_type(spec),
                "spec": spec,
            }
        )
        records.append(record)
    return records


class InMemoryRuleStore:
    """
    Process-local rule store.

    Used by the ``memory`` backend and in tests. Ids are assigned from a
    counter and returned as strings.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._next_id = 1
        for record in records or []:
            self._records[str(record["id"])] = dict(record)

    def _allocate_id(self) -> str:
        while str(self._next_id) in self._records:
            self._next_id += 1
        rule_id = str(self._next_id)
        self._next_id += 1
        return rule_id

    async def list(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records.values()]

    async def create(self, spec: dict[str, Any]) -> dict[str, Any]:
        rule_id = self._allocate_id()
        self._records[rule_id] = build_record(rule_id, spec)
        logger.info("Created rule record", extra={"backend_id": rule_id})
        return {"id": rule_id}

    async def update(self, rule_id: str, spec: dict[str, Any]) -> None:
        existing = self._records.get(str(rule_id))
        if existing is None:
            raise NotFoundError(f"Rule record '{rule_id}' not found", details={"id": rule_id})
        self._records[str(rule_id)] = build_record(existing["id"], spec, existing.get("createdAt"))

    async def delete(self, rule_id: str) -> None:
        if self._records.pop(str(rule_id), None) is None:
            raise NotFoundError(f"Rule record '{rule_id}' not found", details={"id": rule_id})


_memory_store: InMemoryRuleStore | None = None


def get_rule_store() -> RuleStore:
    """
    Build the rule store selected by ``RULE_STORE_BACKEND``.

    The memory store is a process-wide singleton so records survive
    between requests.
    """
    global _memory_store

    backend = settings.rule_store_backend
    if backend == RuleStoreBackend.MEMORY:
        if _memory_store is None:
            _memory_store = InMemoryRuleStore()
        return _memory_store
    if backend == RuleStoreBackend.FILESYSTEM:
        from rule_canvas.repos.filesystem_rule_store import FilesystemRuleStore

        return FilesystemRuleStore(settings.rule_store_dir)
    if backend == RuleStoreBackend.HTTP:
        from rule_canvas.repos.http_rule_store import HttpRuleStore

        return HttpRuleStore(settings.rule_store_url, timeout_s=settings.rule_store_timeout_s)

    raise ValidationError(
        f"Unknown rule store backend: {backend}",
        details={"backend": str(backend), "valid_backends": [b.value for b in RuleStoreBackend]},
    )


def reset_memory_store() -> None:
    """Drop the process-wide memory store (tests)."""
    global _memory_store
    _memory_store = None
