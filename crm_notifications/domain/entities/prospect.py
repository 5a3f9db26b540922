"""Domain entities for prospects and their edit history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

ACTION_EDIT = "edit"
ACTION_REVERT = "revert"
ACTION_UNDO = "undo"
ACTION_REDO = "redo"


@dataclass
class Prospect:
    """A row of a prospect list."""

    id: int | None
    list_id: int
    name: str
    status: str | None = None
    commentaire: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    assigned_to: int | None = None
    rappel_date: datetime | None = None
    updated_at: datetime | None = None

    def snapshot(self) -> dict[str, Any]:
        """Return the editable fields as a JSON-friendly mapping."""

        return {
            "name": self.name,
            "status": self.status,
            "commentaire": self.commentaire,
            "data": dict(self.data or {}),
            "rappel_date": self.rappel_date.isoformat() if self.rappel_date else None,
        }


@dataclass(frozen=True)
class ProspectAction:
    """Append-only log entry describing one change to a prospect.

    ``target_action_id`` is set for ``undo``/``redo``/``revert`` entries and
    points at the ``edit`` entry they act upon.
    """

    id: int | None
    user_id: int | None
    list_id: int
    prospect_id: int
    action_type: str
    old_data: dict[str, Any] | None
    new_data: dict[str, Any] | None
    target_action_id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ActionHistory:
    """Undo/redo stacks derived from a prospect action log.

    ``past`` ends with the most recent undoable action; ``future`` starts
    with the next action to redo.
    """

    past: tuple[ProspectAction, ...] = ()
    future: tuple[ProspectAction, ...] = ()

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)


__all__ = [
    "ACTION_EDIT",
    "ACTION_REDO",
    "ACTION_REVERT",
    "ACTION_UNDO",
    "ActionHistory",
    "Prospect",
    "ProspectAction",
]
