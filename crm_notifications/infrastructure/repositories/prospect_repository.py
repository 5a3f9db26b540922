"""Persistence helpers for prospects and their action log."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm_notifications.domain.entities import Prospect, ProspectAction
from crm_notifications.infrastructure.models import ProspectActionLogModel, ProspectModel
from crm_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone


class ProspectRepository:
    """Provide read and snapshot-update operations for prospects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, prospect_id: int) -> Prospect | None:
        model = self.session.get(ProspectModel, prospect_id)
        return self._to_entity(model) if model else None

    def list_with_rappel_between(self, start: datetime, end: datetime) -> Sequence[Prospect]:
        query = (
            self.session.query(ProspectModel)
            .filter(ProspectModel.rappel_date >= ensure_app_naive_datetime(start))
            .filter(ProspectModel.rappel_date < ensure_app_naive_datetime(end))
            .order_by(ProspectModel.rappel_date.asc(), ProspectModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_with_rappel_before(self, moment: datetime) -> Sequence[Prospect]:
        query = (
            self.session.query(ProspectModel)
            .filter(ProspectModel.rappel_date < ensure_app_naive_datetime(moment))
            .order_by(ProspectModel.rappel_date.asc(), ProspectModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def apply_snapshot(
        self, prospect_id: int, snapshot: dict[str, Any], *, commit: bool = True
    ) -> Prospect:
        """Overwrite the editable fields of a prospect with ``snapshot``."""

        model = self.session.get(ProspectModel, prospect_id)
        if model is None:
            msg = f"Prospect with id {prospect_id} not found"
            raise ValueError(msg)
        if "name" in snapshot and snapshot["name"]:
            model.name = snapshot["name"]
        if "status" in snapshot:
            model.status = snapshot["status"]
        if "commentaire" in snapshot:
            model.commentaire = snapshot["commentaire"]
        if "data" in snapshot:
            model.data = dict(snapshot["data"] or {})
        if "rappel_date" in snapshot:
            model.rappel_date = ensure_app_naive_datetime(_parse_datetime(snapshot["rappel_date"]))
        self.session.add(model)
        if commit:
            self._commit()
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _to_entity(model: ProspectModel) -> Prospect:
        return Prospect(
            id=model.id,
            list_id=model.list_id,
            name=model.name,
            status=model.status,
            commentaire=model.commentaire,
            data=model.data or {},
            assigned_to=model.assigned_to,
            rappel_date=ensure_app_timezone(model.rappel_date),
            updated_at=ensure_app_timezone(model.updated_at),
        )


class ProspectActionLogRepository:
    """Append-only access to ``prospect_action_logs``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, action_id: int) -> ProspectAction | None:
        model = self.session.get(ProspectActionLogModel, action_id)
        return self._to_entity(model) if model else None

    def list_for_list(self, list_id: int) -> Sequence[ProspectAction]:
        """Return the log of ``list_id`` in the order it was written."""

        query = (
            self.session.query(ProspectActionLogModel)
            .filter(ProspectActionLogModel.list_id == list_id)
            .order_by(
                ProspectActionLogModel.created_at.asc(),
                ProspectActionLogModel.id.asc(),
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def append(self, action: ProspectAction, *, commit: bool = True) -> ProspectAction:
        model = ProspectActionLogModel(
            user_id=action.user_id,
            list_id=action.list_id,
            prospect_id=action.prospect_id,
            action_type=action.action_type,
            target_action_id=action.target_action_id,
            old_data=action.old_data,
            new_data=action.new_data,
        )
        if action.created_at is not None:
            model.created_at = ensure_app_naive_datetime(action.created_at)
        self.session.add(model)
        if commit:
            try:
                self.session.commit()
            except SQLAlchemyError:
                self.session.rollback()
                raise
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ProspectActionLogModel) -> ProspectAction:
        return ProspectAction(
            id=model.id,
            user_id=model.user_id,
            list_id=model.list_id,
            prospect_id=model.prospect_id,
            action_type=model.action_type,
            target_action_id=model.target_action_id,
            old_data=model.old_data,
            new_data=model.new_data,
            created_at=ensure_app_timezone(model.created_at),
        )


def _parse_datetime(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


__all__ = ["ProspectActionLogRepository", "ProspectRepository"]
