"""
Filesystem rule store.

Useful for local development without a running rules engine. The whole
library is one JSON file, ``{RULE_STORE_DIR}/rules.json``, holding a list of
records. Upserts keep the original ``createdAt``.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from rule_canvas.core.errors import NotFoundError, RuleStoreError
from rule_canvas.core.observability import store_metrics
from rule_canvas.repos.rule_store import build_record, normalize_rule_records

logger = logging.getLogger(__name__)

LIBRARY_FILENAME = "rules.json"


class FilesystemRuleStore:
    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)
        self.path = self.base_dir / LIBRARY_FILENAME

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise RuleStoreError(
                "Rule library is unreadable",
                details={"path": str(self.path), "error": str(e)},
            ) from e
        return normalize_rule_records(payload)

    def _write(self, records: list[dict[str, Any]]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise RuleStoreError(
                "Failed to write rule library",
                details={"path": str(self.path), "error": str(e)},
            ) from e

    def _index_of(self, records: list[dict[str, Any]], rule_id: str) -> int:
        for i, record in enumerate(records):
            if str(record.get("id")) == str(rule_id):
                return i
        raise NotFoundError(f"Rule record '{rule_id}' not found", details={"id": rule_id})

    async def list(self) -> list[dict[str, Any]]:
        with store_metrics.track("list"):
            return self._read()

    async def create(self, spec: dict[str, Any]) -> dict[str, Any]:
        with store_metrics.track("create"):
            records = self._read()
            rule_id = f"rule_{uuid.uuid4().hex[:12]}"
            records.append(build_record(rule_id, spec))
            self._write(records)
        logger.info(f"Created rule record in {self.path}", extra={"backend_id": rule_id})
        return {"id": rule_id}

    async def update(self, rule_id: str, spec: dict[str, Any]) -> None:
        with store_metrics.track("update"):
            records = self._read()
            idx = self._index_of(records, rule_id)
            existing = records[idx]
            records[idx] = build_record(existing["id"], spec, existing.get("createdAt"))
            self._write(records)

    async def delete(self, rule_id: str) -> None:
        with store_metrics.track("delete"):
            records = self._read()
            idx = self._index_of(records, rule_id)
            del records[idx]
            self._write(records)
