"""Schemas for prospect edits and their history."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class ProspectUpdate(BaseModel):
    """Fields of a prospect that can be edited; omitted fields are kept."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    status: str | None = None
    commentaire: str | None = None
    data: dict[str, Any] | None = None
    rappel_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("rappel_date", "rappelDate")
    )

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProspectRead(BaseModel):
    id: int
    list_id: int
    name: str
    status: str | None = None
    commentaire: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    assigned_to: int | None = None
    rappel_date: datetime | None = None
    updated_at: datetime | None = None


class ProspectActionRead(BaseModel):
    id: int | None
    user_id: int | None
    list_id: int
    prospect_id: int
    action_type: str
    target_action_id: int | None = None
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    created_at: datetime | None = None


class ActionHistoryRead(BaseModel):
    past: list[ProspectActionRead]
    future: list[ProspectActionRead]
    can_undo: bool
    can_redo: bool


class RevertRequest(BaseModel):
    action_id: int = Field(..., validation_alias=AliasChoices("action_id", "actionId"))


class RevertResponse(BaseModel):
    success: bool = True
    reverted: ProspectRead
