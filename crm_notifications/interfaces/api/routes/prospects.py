"""Endpoints editing prospects and walking their action history."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crm_notifications.application.errors import ApplicationError
from crm_notifications.application.use_cases.prospects import (
    get_history,
    redo_last_action,
    revert_action,
    undo_last_action,
    update_prospect,
)
from crm_notifications.domain.entities import Prospect, ProspectAction, User
from crm_notifications.infrastructure.database import get_db
from crm_notifications.interfaces.api.dependencies import get_current_active_user
from crm_notifications.interfaces.api.errors import to_http_exception
from crm_notifications.interfaces.api.schemas import (
    ActionHistoryRead,
    ProspectActionRead,
    ProspectRead,
    ProspectUpdate,
    RevertRequest,
    RevertResponse,
)

router = APIRouter(prefix="/prospects", tags=["prospects"])


def _prospect_to_schema(prospect: Prospect) -> ProspectRead:
    return ProspectRead(
        id=prospect.id,
        list_id=prospect.list_id,
        name=prospect.name,
        status=prospect.status,
        commentaire=prospect.commentaire,
        data=prospect.data or {},
        assigned_to=prospect.assigned_to,
        rappel_date=prospect.rappel_date,
        updated_at=prospect.updated_at,
    )


def _action_to_schema(action: ProspectAction) -> ProspectActionRead:
    return ProspectActionRead(
        id=action.id,
        user_id=action.user_id,
        list_id=action.list_id,
        prospect_id=action.prospect_id,
        action_type=action.action_type,
        target_action_id=action.target_action_id,
        old_data=action.old_data,
        new_data=action.new_data,
        created_at=action.created_at,
    )


@router.patch("/{prospect_id}", response_model=ProspectRead)
def edit_prospect(
    prospect_id: int,
    payload: ProspectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ProspectRead:
    try:
        prospect = update_prospect(db, prospect_id, current_user.id, payload.changes())
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return _prospect_to_schema(prospect)


@router.get("/lists/{list_id}/history", response_model=ActionHistoryRead)
def list_history(
    list_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_active_user),
) -> ActionHistoryRead:
    try:
        history = get_history(db, list_id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return ActionHistoryRead(
        past=[_action_to_schema(action) for action in history.past],
        future=[_action_to_schema(action) for action in history.future],
        can_undo=history.can_undo,
        can_redo=history.can_redo,
    )


@router.post("/lists/{list_id}/undo", response_model=ProspectActionRead)
def undo(
    list_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ProspectActionRead:
    try:
        action = undo_last_action(db, list_id, current_user.id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return _action_to_schema(action)


@router.post("/lists/{list_id}/redo", response_model=ProspectActionRead)
def redo(
    list_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ProspectActionRead:
    try:
        action = redo_last_action(db, list_id, current_user.id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return _action_to_schema(action)


@router.post("/{prospect_id}/revert", response_model=RevertResponse)
def revert(
    prospect_id: int,
    payload: RevertRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> RevertResponse:
    """Restore a prospect to the state preceding one logged action."""

    try:
        prospect = revert_action(db, prospect_id, payload.action_id, current_user.id)
    except ApplicationError as exc:
        raise to_http_exception(exc) from exc
    return RevertResponse(reverted=_prospect_to_schema(prospect))
