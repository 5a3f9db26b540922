"""Shared fixtures: a throwaway SQLite database and row builders."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "crm_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["APP_TIMEZONE"] = "Europe/Paris"
for name in ("CRON_SECRET_TOKEN", "SENDGRID_API_KEY", "SENDGRID_SENDER"):
    os.environ.pop(name, None)

from crm_notifications.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from crm_notifications.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from crm_notifications.infrastructure.models import (  # noqa: E402
    BookingModel,
    NotificationModel,
    ProjectModel,
    ProspectModel,
    TaskModel,
    UserModel,
)
from crm_notifications.infrastructure.security import get_password_hash  # noqa: E402
from crm_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone  # noqa: E402

DEFAULT_PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def now() -> datetime:
    """A fixed instant in the application timezone."""

    return ensure_app_timezone(datetime(2025, 3, 10, 9, 0, 0))


def _insert(model):
    with SessionLocal() as db:
        db.add(model)
        db.commit()
        db.refresh(model)
        return model.id


@pytest.fixture()
def add_user():
    counter = {"value": 0}

    def _add_user(
        *, email: str | None = None, name: str = "Camille Martin", is_active: bool = True
    ) -> int:
        counter["value"] += 1
        return _insert(
            UserModel(
                name=name,
                email=email or f"user{counter['value']}@example.com",
                password=get_password_hash(DEFAULT_PASSWORD),
                is_active=is_active,
            )
        )

    return _add_user


@pytest.fixture()
def add_task():
    def _add_task(
        *,
        assigned_to: int | None,
        due_date: datetime | None = None,
        status: str = "todo",
        title: str = "Relancer le client",
        status_changed_at: datetime | None = None,
        created_at: datetime | None = None,
        project_id: int | None = None,
    ) -> int:
        model = TaskModel(
            title=title,
            status=status,
            assigned_to=assigned_to,
            project_id=project_id,
            due_date=ensure_app_naive_datetime(due_date),
            status_changed_at=ensure_app_naive_datetime(status_changed_at),
        )
        if created_at is not None:
            model.created_at = ensure_app_naive_datetime(created_at)
        return _insert(model)

    return _add_task


@pytest.fixture()
def add_project():
    def _add_project(
        *,
        assigned_to: int | None,
        deadline: datetime | None,
        status: str = "active",
        name: str = "Refonte du site",
    ) -> int:
        return _insert(
            ProjectModel(
                name=name,
                status=status,
                assigned_to=assigned_to,
                deadline=ensure_app_naive_datetime(deadline),
            )
        )

    return _add_project


@pytest.fixture()
def add_prospect():
    def _add_prospect(
        *,
        assigned_to: int | None = None,
        rappel_date: datetime | None = None,
        list_id: int = 1,
        name: str = "Dupont SARL",
        status: str | None = "nouveau",
        data: dict | None = None,
    ) -> int:
        return _insert(
            ProspectModel(
                list_id=list_id,
                name=name,
                status=status,
                data=data or {},
                assigned_to=assigned_to,
                rappel_date=ensure_app_naive_datetime(rappel_date),
            )
        )

    return _add_prospect


@pytest.fixture()
def add_booking():
    def _add_booking(
        *,
        host_user_id: int,
        start_time: datetime,
        status: str = "confirmed",
        guest_email: str = "guest@example.com",
        reminder_sent_at: datetime | None = None,
    ) -> int:
        return _insert(
            BookingModel(
                host_user_id=host_user_id,
                guest_name="Alex Guest",
                guest_email=guest_email,
                meeting_type="Démo produit",
                start_time=ensure_app_naive_datetime(start_time),
                end_time=ensure_app_naive_datetime(start_time + timedelta(minutes=30)),
                status=status,
                reminder_sent_at=ensure_app_naive_datetime(reminder_sent_at),
            )
        )

    return _add_booking


@pytest.fixture()
def add_notification():
    def _add_notification(
        *,
        user_id: int,
        type: str = "task_overdue",
        priority: str = "medium",
        is_read: bool = False,
        source_entity_id: str | None = None,
        created_at: datetime | None = None,
        title: str = "Notification",
    ) -> int:
        model = NotificationModel(
            user_id=user_id,
            type=type,
            priority=priority,
            title=title,
            message="Message",
            data={},
            source_entity_id=source_entity_id,
            is_read=is_read,
        )
        if created_at is not None:
            model.created_at = ensure_app_naive_datetime(created_at)
        return _insert(model)

    return _add_notification


@pytest.fixture()
def password() -> str:
    return DEFAULT_PASSWORD
