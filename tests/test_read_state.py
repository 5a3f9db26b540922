"""Ownership, read flags and listing of stored notifications."""

from __future__ import annotations

from datetime import timedelta

import pytest

from crm_notifications.application.errors import (
    NotificationAccessError,
    NotificationNotFoundError,
)
from crm_notifications.application.use_cases.notifications import (
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    run_notification_checks,
)
from crm_notifications.application.use_cases.notifications import read_state
from crm_notifications.application.use_cases.notifications.rules import TaskOverdueRule
from crm_notifications.domain.entities import (
    NotificationFilters,
    NotificationPriority,
    NotificationSort,
    NotificationSortField,
    NotificationType,
    SortDirection,
)
from crm_notifications.infrastructure.repositories import NotificationRepository


def test_mark_read_is_idempotent(session, add_user, add_notification) -> None:
    user_id = add_user()
    notification_id = add_notification(user_id=user_id)

    first = mark_read(session, notification_id, user_id)
    second = mark_read(session, notification_id, user_id)

    assert first.is_read is True
    assert second.is_read is True


def test_mark_read_can_flag_as_unread(session, add_user, add_notification) -> None:
    user_id = add_user()
    notification_id = add_notification(user_id=user_id, is_read=True)

    updated = mark_read(session, notification_id, user_id, is_read=False)

    assert updated.is_read is False


def test_other_users_cannot_touch_a_notification(session, add_user, add_notification) -> None:
    owner = add_user()
    intruder = add_user()
    notification_id = add_notification(user_id=owner)

    with pytest.raises(NotificationAccessError):
        mark_read(session, notification_id, intruder)
    with pytest.raises(NotificationAccessError):
        delete_notification(session, notification_id, intruder)

    stored = NotificationRepository(session).get(notification_id)
    assert stored is not None
    assert stored.is_read is False


def test_missing_notification_is_not_found(session, add_user) -> None:
    user_id = add_user()

    with pytest.raises(NotificationNotFoundError):
        mark_read(session, 999, user_id)
    with pytest.raises(NotificationNotFoundError):
        delete_notification(session, 999, user_id)


def test_listing_for_someone_else_is_refused(session, add_user) -> None:
    owner = add_user()
    intruder = add_user()

    with pytest.raises(NotificationAccessError):
        list_notifications(session, owner, acting_user_id=intruder)
    with pytest.raises(NotificationAccessError):
        mark_all_read(session, owner, acting_user_id=intruder)


def test_mark_all_read_only_touches_the_caller(session, add_user, add_notification) -> None:
    user_id = add_user()
    other_id = add_user()
    for _ in range(5):
        add_notification(user_id=user_id)
    for _ in range(3):
        add_notification(user_id=user_id, is_read=True)
    add_notification(user_id=other_id)

    updated = mark_all_read(session, user_id)

    repository = NotificationRepository(session)
    assert updated == 5
    assert repository.count_for_user(user_id, is_read=False) == 0
    assert repository.count_for_user(user_id, is_read=True) == 8
    assert repository.count_for_user(other_id, is_read=False) == 1
    assert mark_all_read(session, user_id) == 0


def test_delete_removes_the_notification(session, add_user, add_notification) -> None:
    user_id = add_user()
    notification_id = add_notification(user_id=user_id)

    delete_notification(session, notification_id, user_id)

    assert NotificationRepository(session).get(notification_id) is None


def test_list_defaults_to_newest_first(session, now, add_user, add_notification) -> None:
    user_id = add_user()
    oldest = add_notification(user_id=user_id, created_at=now - timedelta(days=2))
    newest = add_notification(user_id=user_id, created_at=now)
    middle = add_notification(user_id=user_id, created_at=now - timedelta(days=1))

    listed = list_notifications(session, user_id)

    assert [n.id for n in listed] == [newest, middle, oldest]


def test_priority_sort_uses_rank(session, now, add_user, add_notification) -> None:
    user_id = add_user()
    medium = add_notification(user_id=user_id, priority="medium")
    urgent = add_notification(user_id=user_id, priority="urgent")
    low = add_notification(user_id=user_id, priority="low")
    high = add_notification(user_id=user_id, priority="high")

    descending = list_notifications(
        session, user_id, sort=NotificationSort(field=NotificationSortField.PRIORITY)
    )
    ascending = list_notifications(
        session,
        user_id,
        sort=NotificationSort(field=NotificationSortField.PRIORITY, direction=SortDirection.ASC),
    )

    assert [n.id for n in descending] == [urgent, high, medium, low]
    assert [n.id for n in ascending] == [low, medium, high, urgent]


def test_filters_combine(session, now, add_user, add_notification) -> None:
    user_id = add_user()
    match = add_notification(
        user_id=user_id, type="task_overdue", priority="urgent", created_at=now
    )
    add_notification(user_id=user_id, type="task_overdue", priority="urgent", is_read=True)
    add_notification(user_id=user_id, type="deadline_passed", priority="urgent", created_at=now)
    add_notification(
        user_id=user_id,
        type="task_overdue",
        priority="urgent",
        created_at=now - timedelta(days=10),
    )
    add_notification(user_id=user_id, type="task_overdue", priority="low", created_at=now)

    listed = list_notifications(
        session,
        user_id,
        filters=NotificationFilters(
            types=(NotificationType.TASK_OVERDUE,),
            priorities=(NotificationPriority.URGENT,),
            is_read=False,
            created_from=now - timedelta(days=1),
            created_to=now + timedelta(days=1),
        ),
    )

    assert [n.id for n in listed] == [match]


def test_pagination(session, now, add_user, add_notification) -> None:
    user_id = add_user()
    ids = [
        add_notification(user_id=user_id, created_at=now - timedelta(minutes=index))
        for index in range(5)
    ]

    page = list_notifications(session, user_id, limit=2, offset=2)

    assert [n.id for n in page] == ids[2:4]


def test_mark_unread_keeps_read_when_a_newer_notification_covers_the_task(
    session, now, add_user, add_task
) -> None:
    user_id = add_user()
    add_task(assigned_to=user_id, due_date=now - timedelta(hours=2))
    run_notification_checks(session, now=now, evaluators=[TaskOverdueRule()])
    (old,) = list_notifications(session, user_id)
    mark_read(session, old.id, user_id)
    run_notification_checks(session, now=now + timedelta(hours=1), evaluators=[TaskOverdueRule()])

    result = mark_read(session, old.id, user_id, is_read=False)

    assert result.id == old.id
    assert result.is_read is True
    unread = list_notifications(session, user_id, filters=NotificationFilters(is_read=False))
    assert len(unread) == 1
    assert unread[0].id != old.id


def test_mark_unread_conflict_in_store_leaves_the_row_read(
    session, add_user, add_notification, monkeypatch: pytest.MonkeyPatch
) -> None:
    user_id = add_user()
    old = add_notification(user_id=user_id, source_entity_id="42", is_read=True)
    add_notification(user_id=user_id, source_entity_id="42")
    monkeypatch.setattr(read_state, "_has_unread_sibling", lambda repository, notification: False)

    result = mark_read(session, old, user_id, is_read=False)

    assert result.is_read is True
    assert NotificationRepository(session).get(old).is_read is True
