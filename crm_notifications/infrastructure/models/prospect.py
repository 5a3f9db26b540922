"""SQLAlchemy models for prospects and the prospect action log."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text

from crm_notifications.infrastructure.database import Base
from crm_notifications.utils import now_in_app_naive_datetime


class ProspectModel(Base):
    __tablename__ = "prospects"

    id = Column(Integer, primary_key=True, index=True)
    list_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    status = Column(String(50), nullable=True)
    commentaire = Column(Text, nullable=True)
    data = Column(JSON, nullable=True)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    rappel_date = Column(DateTime, nullable=True, index=True)
    updated_at = Column(DateTime, nullable=True, onupdate=now_in_app_naive_datetime)


class ProspectActionLogModel(Base):
    """Append-only history of prospect edits; rows are never updated."""

    __tablename__ = "prospect_action_logs"
    __table_args__ = (
        Index("ix_prospect_action_logs_key", "list_id", "prospect_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    list_id = Column(Integer, nullable=False)
    prospect_id = Column(Integer, ForeignKey("prospects.id", ondelete="CASCADE"), nullable=False)
    action_type = Column(String(20), nullable=False)
    target_action_id = Column(Integer, nullable=True)
    old_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["ProspectActionLogModel", "ProspectModel"]
