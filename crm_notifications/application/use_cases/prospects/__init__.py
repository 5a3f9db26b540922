"""Use cases for prospect edits and their undo/redo history."""

from .action_log import (
    build_history,
    get_history,
    plan_redo,
    plan_undo,
    redo_last_action,
    revert_action,
    undo_last_action,
    update_prospect,
)

__all__ = [
    "build_history",
    "get_history",
    "plan_redo",
    "plan_undo",
    "redo_last_action",
    "revert_action",
    "undo_last_action",
    "update_prospect",
]
