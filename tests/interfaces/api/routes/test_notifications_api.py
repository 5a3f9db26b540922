"""HTTP tests for the notification endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from crm_notifications.application.use_cases.notifications import (
    RuleRunResult,
    TriggerRunSummary,
)
from crm_notifications.infrastructure.database import SessionLocal
from crm_notifications.infrastructure.repositories import NotificationRepository
from crm_notifications.interfaces.api.routes import notifications as notifications_routes
from crm_notifications.utils import now_in_app_timezone


def test_listing_requires_authentication(client: TestClient) -> None:
    response = client.get("/notifications")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_list_returns_only_own_notifications(
    client: TestClient, login, add_user, add_notification
) -> None:
    owner = add_user(email="owner@example.com")
    other = add_user(email="other@example.com")
    mine = add_notification(user_id=owner, title="À moi")
    add_notification(user_id=other, title="Pas à moi")

    response = client.get("/notifications", headers=login("owner@example.com"))

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body] == [mine]
    assert body[0]["title"] == "À moi"
    assert body[0]["is_read"] is False


def test_list_filters_and_sorts(client: TestClient, login, add_user, add_notification) -> None:
    owner = add_user(email="owner@example.com")
    low = add_notification(user_id=owner, type="task_overdue", priority="low")
    urgent = add_notification(user_id=owner, type="task_overdue", priority="urgent")
    add_notification(user_id=owner, type="forgotten_task", priority="high")

    response = client.get(
        "/notifications",
        params={"type": ["task_overdue"], "sort_by": "priority", "sort_order": "desc"},
        headers=login("owner@example.com"),
    )

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [urgent, low]


def test_invalid_filter_value_is_a_bad_request(client: TestClient, login, add_user) -> None:
    add_user(email="owner@example.com")

    response = client.get(
        "/notifications", params={"priority": "critical"}, headers=login("owner@example.com")
    )

    assert response.status_code == 400
    assert "priority" in response.json()["error"]


def test_patch_marks_read_and_guards_ownership(
    client: TestClient, login, add_user, add_notification
) -> None:
    owner = add_user(email="owner@example.com")
    add_user(email="intruder@example.com")
    notification_id = add_notification(user_id=owner)

    denied = client.patch(
        f"/notifications/{notification_id}",
        json={"isRead": True},
        headers=login("intruder@example.com"),
    )
    missing = client.patch(
        "/notifications/9999", json={"is_read": True}, headers=login("owner@example.com")
    )
    allowed = client.patch(
        f"/notifications/{notification_id}",
        json={"isRead": True},
        headers=login("owner@example.com"),
    )

    assert denied.status_code == 403
    assert denied.json() == {"error": "Vous n'avez pas accès à cette notification"}
    assert missing.status_code == 404
    assert missing.json() == {"error": "Notification introuvable"}
    assert allowed.status_code == 200
    assert allowed.json()["is_read"] is True


def test_delete_notification(client: TestClient, login, add_user, add_notification) -> None:
    owner = add_user(email="owner@example.com")
    notification_id = add_notification(user_id=owner)
    headers = login("owner@example.com")

    response = client.delete(f"/notifications/{notification_id}", headers=headers)
    again = client.delete(f"/notifications/{notification_id}", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert again.status_code == 404


def test_mark_all_read(client: TestClient, login, add_user, add_notification) -> None:
    owner = add_user(email="owner@example.com")
    other = add_user(email="other@example.com")
    for _ in range(3):
        add_notification(user_id=owner)
    add_notification(user_id=other)

    response = client.patch("/notifications/mark-all-read", headers=login("owner@example.com"))

    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 3}
    with SessionLocal() as session:
        assert NotificationRepository(session).count_for_user(other, is_read=False) == 1


def test_create_requires_title(client: TestClient, login, add_user) -> None:
    add_user(email="owner@example.com")

    response = client.post(
        "/notifications",
        json={"type": "task_assigned", "message": "Bonjour"},
        headers=login("owner@example.com"),
    )

    assert response.status_code == 400
    assert "title" in response.json()["error"]


def test_create_rejects_a_title_longer_than_the_column(
    client: TestClient, login, add_user
) -> None:
    add_user(email="owner@example.com")
    headers = login("owner@example.com")

    too_long = client.post(
        "/notifications",
        json={"type": "task_assigned", "title": "x" * 201, "message": "Bonjour"},
        headers=headers,
    )
    longest = client.post(
        "/notifications",
        json={"type": "task_assigned", "title": "x" * 200, "message": "Bonjour"},
        headers=headers,
    )

    assert too_long.status_code == 400
    assert "title" in too_long.json()["error"]
    assert longest.status_code == 201


def test_create_and_test_endpoints(client: TestClient, login, add_user) -> None:
    add_user(email="owner@example.com")
    headers = login("owner@example.com")

    created = client.post(
        "/notifications",
        json={
            "type": "task_assigned",
            "title": "Point d'équipe",
            "message": "Réunion à 14h",
            "priority": "low",
            "actionUrl": "/dashboard",
        },
        headers=headers,
    )
    test = client.post("/notifications/test", headers=headers)

    assert created.status_code == 201
    assert created.json()["action_url"] == "/dashboard"
    assert created.json()["priority"] == "low"
    assert test.status_code == 200
    assert test.json()["success"] is True
    listed = client.get("/notifications", headers=headers).json()
    assert len(listed) == 2


def test_check_triggers_runs_every_rule(
    client: TestClient, add_user, add_task
) -> None:
    user_id = add_user()
    add_task(assigned_to=user_id, due_date=now_in_app_timezone() - timedelta(hours=1))

    first = client.post("/notifications/check-triggers")
    second = client.post("/notifications/check-triggers")

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["created"] == 1
    assert len(body["rules"]) == 7
    assert second.json()["created"] == 0
    assert second.json()["skipped"] == 1


def test_check_triggers_requires_the_cron_secret(client: TestClient, cron_secret: str) -> None:
    missing = client.post("/notifications/check-triggers")
    wrong = client.post(
        "/notifications/check-triggers", headers={"Authorization": "Bearer nope"}
    )
    right = client.post(
        "/notifications/check-triggers", headers={"Authorization": f"Bearer {cron_secret}"}
    )

    assert missing.status_code == 401
    assert missing.json() == {"error": "Unauthorized"}
    assert wrong.status_code == 401
    assert right.status_code == 200


def test_check_triggers_reports_total_failure(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    summary = TriggerRunSummary(
        ran_at=datetime(2025, 3, 10, 9, 0),
        rules=[RuleRunResult(rule="task_overdue", error="database is locked")],
    )
    monkeypatch.setattr(
        notifications_routes, "run_notification_checks", lambda session: summary
    )

    response = client.post("/notifications/check-triggers")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Échec de la vérification des notifications"
    assert "task_overdue: database is locked" in body["details"]


def test_websocket_sends_pending_and_accepts_acks(
    client: TestClient, login, add_user, add_notification
) -> None:
    owner = add_user(email="owner@example.com")
    notification_id = add_notification(user_id=owner)
    token = login("owner@example.com")["Authorization"].split(" ", 1)[1]

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        websocket.send_json({"type": "ack", "ids": [notification_id]})
        websocket.send_json({"type": "ping"})
        pong = websocket.receive_json()

    assert init["type"] == "init"
    assert [item["id"] for item in init["data"]] == [notification_id]
    assert pong == {"type": "pong"}
    with SessionLocal() as session:
        assert NotificationRepository(session).get(notification_id).is_read is True
