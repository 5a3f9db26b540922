"""Prospect edits backed by an append-only action log.

The undo/redo stacks are never stored: :func:`build_history` rebuilds them by
folding the log of a list, and every undo, redo or revert is itself appended
to the log.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.application.errors import NotFoundError, StoreError, ValidationError
from crm_notifications.domain.entities import (
    ACTION_EDIT,
    ACTION_REDO,
    ACTION_REVERT,
    ACTION_UNDO,
    ActionHistory,
    Prospect,
    ProspectAction,
)
from crm_notifications.infrastructure.repositories import (
    ProspectActionLogRepository,
    ProspectRepository,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "status", "commentaire", "data", "rappel_date"})


def build_history(entries: Iterable[ProspectAction]) -> ActionHistory:
    """Fold log entries, oldest first, into undo/redo stacks."""

    past: list[ProspectAction] = []
    future: list[ProspectAction] = []
    for entry in entries:
        if entry.action_type in (ACTION_EDIT, ACTION_REVERT):
            past.append(entry)
            future.clear()
        elif entry.action_type == ACTION_UNDO:
            target = _pop_target(past, entry.target_action_id)
            if target is not None:
                future.insert(0, target)
        elif entry.action_type == ACTION_REDO:
            target = _pop_target(future, entry.target_action_id)
            if target is not None:
                past.append(target)
        else:
            logger.warning("Ignoring unknown prospect action type %s", entry.action_type)
    return ActionHistory(past=tuple(past), future=tuple(future))


def _pop_target(stack: list[ProspectAction], target_id: int | None) -> ProspectAction | None:
    for index in range(len(stack) - 1, -1, -1):
        if stack[index].id == target_id:
            return stack.pop(index)
    return None


def plan_undo(history: ActionHistory) -> ProspectAction | None:
    """Return the action an undo would roll back, if any."""

    return history.past[-1] if history.past else None


def plan_redo(history: ActionHistory) -> ProspectAction | None:
    """Return the action a redo would re-apply, if any."""

    return history.future[0] if history.future else None


def get_history(session: Session, list_id: int) -> ActionHistory:
    try:
        entries = ProspectActionLogRepository(session).list_for_list(list_id)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de lire l'historique", details=str(exc)) from exc
    return build_history(entries)


def update_prospect(
    session: Session, prospect_id: int, user_id: int | None, changes: dict[str, Any]
) -> Prospect:
    """Apply ``changes`` to a prospect and log an ``edit`` entry."""

    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Champs non modifiables: {', '.join(unknown)}")
    if not changes:
        raise ValidationError("Aucune modification fournie")
    if "name" in changes and not changes["name"]:
        raise ValidationError("Le nom du prospect est requis")

    prospect = _get_prospect(session, prospect_id)
    old_data = prospect.snapshot()
    new_data = {**old_data, **changes}
    if new_data.get("rappel_date") is not None and not isinstance(new_data["rappel_date"], str):
        new_data["rappel_date"] = new_data["rappel_date"].isoformat()

    updated, _ = _apply_and_log(
        session,
        prospect,
        snapshot=new_data,
        entry=ProspectAction(
            id=None,
            user_id=user_id,
            list_id=prospect.list_id,
            prospect_id=prospect.id,
            action_type=ACTION_EDIT,
            old_data=old_data,
            new_data=new_data,
        ),
    )
    return updated


def undo_last_action(session: Session, list_id: int, user_id: int | None) -> ProspectAction:
    """Restore the state preceding the latest undoable action of ``list_id``."""

    target = plan_undo(get_history(session, list_id))
    if target is None:
        raise ValidationError("Aucune action à annuler")
    return _replay(session, target, user_id, action_type=ACTION_UNDO, snapshot=target.old_data)


def redo_last_action(session: Session, list_id: int, user_id: int | None) -> ProspectAction:
    """Re-apply the most recently undone action of ``list_id``."""

    target = plan_redo(get_history(session, list_id))
    if target is None:
        raise ValidationError("Aucune action à rétablir")
    return _replay(session, target, user_id, action_type=ACTION_REDO, snapshot=target.new_data)


def revert_action(
    session: Session, prospect_id: int, action_id: int, user_id: int | None
) -> Prospect:
    """Put a prospect back in the state recorded before ``action_id``."""

    try:
        action = ProspectActionLogRepository(session).get(action_id)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de lire l'historique", details=str(exc)) from exc
    if action is None or action.prospect_id != prospect_id:
        raise NotFoundError("Action introuvable")
    if action.old_data is None:
        raise ValidationError("Cette action ne peut pas être annulée")

    prospect = _get_prospect(session, prospect_id)
    updated, _ = _apply_and_log(
        session,
        prospect,
        snapshot=action.old_data,
        entry=ProspectAction(
            id=None,
            user_id=user_id if user_id is not None else action.user_id,
            list_id=action.list_id,
            prospect_id=prospect_id,
            action_type=ACTION_REVERT,
            old_data=prospect.snapshot(),
            new_data=action.old_data,
            target_action_id=action.id,
        ),
    )
    return updated


def _replay(
    session: Session,
    target: ProspectAction,
    user_id: int | None,
    *,
    action_type: str,
    snapshot: dict[str, Any] | None,
) -> ProspectAction:
    if snapshot is None:
        raise ValidationError("Cette action ne peut pas être rejouée")
    prospect = _get_prospect(session, target.prospect_id)
    entry = ProspectAction(
        id=None,
        user_id=user_id,
        list_id=target.list_id,
        prospect_id=target.prospect_id,
        action_type=action_type,
        old_data=prospect.snapshot(),
        new_data=snapshot,
        target_action_id=target.id,
    )
    _, saved = _apply_and_log(session, prospect, snapshot=snapshot, entry=entry)
    logger.info("%s of action %s on prospect %s", action_type, target.id, target.prospect_id)
    return saved


def _apply_and_log(
    session: Session, prospect: Prospect, *, snapshot: dict[str, Any], entry: ProspectAction
) -> tuple[Prospect, ProspectAction]:
    prospects = ProspectRepository(session)
    log = ProspectActionLogRepository(session)
    try:
        updated = prospects.apply_snapshot(prospect.id, snapshot, commit=False)
        saved = log.append(entry, commit=False)
        session.commit()
    except (SQLAlchemyError, ValueError) as exc:
        session.rollback()
        raise StoreError("Impossible d'enregistrer la modification", details=str(exc)) from exc
    return updated, saved


def _get_prospect(session: Session, prospect_id: int) -> Prospect:
    try:
        prospect = ProspectRepository(session).get(prospect_id)
    except SQLAlchemyError as exc:
        raise StoreError("Impossible de lire le prospect", details=str(exc)) from exc
    if prospect is None:
        raise NotFoundError("Prospect introuvable")
    return prospect


__all__ = [
    "EDITABLE_FIELDS",
    "build_history",
    "get_history",
    "plan_redo",
    "plan_undo",
    "redo_last_action",
    "revert_action",
    "undo_last_action",
    "update_prospect",
]
