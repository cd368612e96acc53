# tests/test_tasks_api.py

from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient

from apps.schemas import TaskOut

TASKS = "/api/tasks"


def create(client: TestClient, title: str, description: str = "") -> dict:
    response = client.post(TASKS, json={"title": title, "description": description})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_returns_full_entity_in_camel_case(client: TestClient) -> None:
    response = client.post(TASKS, json={"title": "Write report", "description": "Q3 numbers"})

    assert response.status_code == 201
    body = response.json()
    assert set(body) == {"id", "title", "description", "createdAt", "isCompleted"}
    assert body["title"] == "Write report"
    assert body["description"] == "Q3 numbers"
    assert body["isCompleted"] is False
    assert response.headers["location"].endswith(f"{TASKS}/{body['id']}")


def test_created_ids_are_unique(client: TestClient) -> None:
    ids = [create(client, f"task {i}")["id"] for i in range(5)]

    assert len(set(ids)) == 5


def test_created_at_is_server_time_not_client_value(client: TestClient) -> None:
    before = datetime.now(timezone.utc)
    response = client.post(
        TASKS,
        json={
            "title": "Backdated",
            "createdAt": "2000-01-01T00:00:00Z",
            "isCompleted": True,
            "id": 12345,
        },
    )
    after = datetime.now(timezone.utc)

    task = TaskOut.model_validate(response.json())
    assert before <= task.created_at <= after
    assert task.is_completed is False
    assert task.id != 12345

    stored = TaskOut.model_validate(client.get(f"{TASKS}/{task.id}").json())
    assert stored.created_at == task.created_at


def test_description_is_optional(client: TestClient) -> None:
    response = client.post(TASKS, json={"title": "No description"})

    assert response.status_code == 201
    assert response.json()["description"] == ""


def test_list_is_newest_first(client: TestClient) -> None:
    first = create(client, "first")
    second = create(client, "second")
    third = create(client, "third")

    response = client.get(TASKS)

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [third["id"], second["id"], first["id"]]


def test_get_by_id(client: TestClient) -> None:
    created = create(client, "lookup me", "details")

    response = client.get(f"{TASKS}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_missing_task_returns_404(client: TestClient) -> None:
    response = client.get(f"{TASKS}/999")

    assert response.status_code == 404
    assert response.json()["message"] == "Task with ID 999 not found."


def test_update_replaces_all_fields(client: TestClient) -> None:
    created = create(client, "old title", "old description")

    response = client.put(
        f"{TASKS}/{created['id']}",
        json={"title": "new title", "description": "new description", "isCompleted": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["title"] == "new title"
    assert body["description"] == "new description"
    assert body["isCompleted"] is True
    assert body["createdAt"] == created["createdAt"]


def test_update_resets_omitted_fields_to_request_defaults(client: TestClient) -> None:
    created = create(client, "keep me", "this description will be lost")
    client.put(
        f"{TASKS}/{created['id']}",
        json={"title": "keep me", "description": "still here", "isCompleted": True},
    )

    response = client.put(f"{TASKS}/{created['id']}", json={"title": "keep me"})

    assert response.status_code == 200
    body = response.json()
    assert body["description"] == ""
    assert body["isCompleted"] is False


def test_update_requires_title(client: TestClient) -> None:
    created = create(client, "title needed")

    response = client.put(f"{TASKS}/{created['id']}", json={"isCompleted": True})

    assert response.status_code == 400
    assert client.get(f"{TASKS}/{created['id']}").json()["isCompleted"] is False


def test_update_missing_task_returns_404(client: TestClient) -> None:
    response = client.put(f"{TASKS}/404", json={"title": "ghost", "isCompleted": True})

    assert response.status_code == 404


def test_update_accepts_snake_case_fields(client: TestClient) -> None:
    created = create(client, "snake")

    response = client.put(f"{TASKS}/{created['id']}", json={"title": "snake", "is_completed": True})

    assert response.json()["isCompleted"] is True


def test_delete_then_get_returns_404(client: TestClient) -> None:
    created = create(client, "short lived")

    response = client.delete(f"{TASKS}/{created['id']}")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get(f"{TASKS}/{created['id']}").status_code == 404


def test_delete_missing_task_returns_404(client: TestClient) -> None:
    created = create(client, "once")
    assert client.delete(f"{TASKS}/{created['id']}").status_code == 204

    response = client.delete(f"{TASKS}/{created['id']}")

    assert response.status_code == 404
    assert response.json()["statusCode"] == 404


def test_summary_counts_and_ai_text(client: TestClient, summarizer) -> None:
    a = create(client, "a")
    create(client, "b")
    create(client, "c")
    client.put(f"{TASKS}/{a['id']}", json={"title": "a", "isCompleted": True})

    before = datetime.now(timezone.utc)
    response = client.post(f"{TASKS}/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["totalTasks"] == 3
    assert body["completedTasks"] == 1
    assert body["pendingTasks"] == 2
    assert body["aiSummary"] == "All good."
    generated_at = datetime.fromisoformat(body["generatedAt"].replace("Z", "+00:00"))
    assert generated_at >= before
    assert len(summarizer.calls) == 1
    assert {t.title for t in summarizer.calls[0]} == {"a", "b", "c"}


def test_health_reports_connections(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "connections": 0}
