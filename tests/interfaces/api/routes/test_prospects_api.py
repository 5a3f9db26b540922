"""HTTP tests for prospect edits and their history."""

from __future__ import annotations

from fastapi.testclient import TestClient


def test_edit_undo_redo_and_history(
    client: TestClient, login, add_user, add_prospect
) -> None:
    add_user(email="sales@example.com")
    prospect_id = add_prospect(list_id=4, status="nouveau")
    headers = login("sales@example.com")

    edited = client.patch(
        f"/prospects/{prospect_id}", json={"status": "rappeler"}, headers=headers
    )
    undone = client.post("/prospects/lists/4/undo", headers=headers)
    history = client.get("/prospects/lists/4/history", headers=headers)
    redone = client.post("/prospects/lists/4/redo", headers=headers)

    assert edited.status_code == 200
    assert edited.json()["status"] == "rappeler"
    assert undone.status_code == 200
    assert undone.json()["action_type"] == "undo"
    assert undone.json()["id"] is not None
    assert undone.json()["created_at"] is not None
    assert history.json()["can_undo"] is False
    assert history.json()["can_redo"] is True
    assert redone.json()["new_data"]["status"] == "rappeler"
    assert redone.json()["id"] is not None
    assert redone.json()["id"] != undone.json()["id"]
    assert redone.json()["created_at"] is not None


def test_undo_without_history_is_a_bad_request(client: TestClient, login, add_user) -> None:
    add_user(email="sales@example.com")

    response = client.post("/prospects/lists/77/undo", headers=login("sales@example.com"))

    assert response.status_code == 400
    assert response.json() == {"error": "Aucune action à annuler"}


def test_edit_missing_prospect_is_not_found(client: TestClient, login, add_user) -> None:
    add_user(email="sales@example.com")

    response = client.patch(
        "/prospects/404", json={"status": "x"}, headers=login("sales@example.com")
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Prospect introuvable"}


def test_revert_to_a_logged_action(client: TestClient, login, add_user, add_prospect) -> None:
    add_user(email="sales@example.com")
    prospect_id = add_prospect(list_id=4, data={"ville": "Nantes"})
    headers = login("sales@example.com")
    client.patch(f"/prospects/{prospect_id}", json={"data": {"ville": "Brest"}}, headers=headers)
    action_id = client.get("/prospects/lists/4/history", headers=headers).json()["past"][0]["id"]

    response = client.post(
        f"/prospects/{prospect_id}/revert", json={"actionId": action_id}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["reverted"]["data"] == {"ville": "Nantes"}
