"""
Repository layer for rule persistence and rule metadata.

Stores implement the four-operation RuleStore protocol (list, create,
update, delete); get_rule_store() picks one from settings.
"""

from rule_canvas.repos.filesystem_rule_store import FilesystemRuleStore
from rule_canvas.repos.http_rule_store import HttpRuleStore
from rule_canvas.repos.metadata_repo import load_metadata
from rule_canvas.repos.rule_store import (
    InMemoryRuleStore,
    RuleStore,
    get_rule_store,
    normalize_rule_records,
)

__all__ = [
    "RuleStore",
    "InMemoryRuleStore",
    "FilesystemRuleStore",
    "HttpRuleStore",
    "get_rule_store",
    "normalize_rule_records",
    "load_metadata",
]
