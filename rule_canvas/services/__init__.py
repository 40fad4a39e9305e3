"""
Services package for the rule canvas.

Contains the backend sync logic that sits between the canvas graph and the
remote rule store.
"""

from rule_canvas.services.backend_sync import delete_rule, has_valid_id, save_rule

__all__ = ["save_rule", "delete_rule", "has_valid_id"]
