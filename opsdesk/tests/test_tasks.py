"""
Tests for task lifecycle: create, status updates, notes, delete
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from opsdesk.core.errors import AppError
from opsdesk.models.task import Task, TaskNote, TaskStatus
from opsdesk.services import task_service
from opsdesk.services.user_service import create_user


@pytest.fixture
def task(db, alice, bob):
    """Task assigned by Bob to Alice"""
    return task_service.create_task(db, "Fix login", "Users cannot log in", alice.id, bob.id)


def test_create_task_initial_state(task, alice, bob):
    assert task.status == "pending"
    assert task.notes == []
    assert task.is_approved is False
    assert task.approved_by_id is None
    assert task.assigned_to.id == alice.id
    assert task.assigned_by.id == bob.id


@pytest.mark.parametrize("field", ["title", "description", "assigned_to_id"])
def test_create_task_missing_field(db, alice, bob, field):
    values = {"title": "T", "description": "D", "assigned_to_id": alice.id}
    values[field] = None

    with pytest.raises(AppError) as exc_info:
        task_service.create_task(db, assigned_by_id=bob.id, **values)

    assert exc_info.value.status_code == 400
    assert exc_info.value.code == "VALIDATION_ERROR"


def test_create_task_unknown_assignee(db, bob):
    with pytest.raises(AppError) as exc_info:
        task_service.create_task(db, "T", "D", 9999, bob.id)

    assert exc_info.value.code == "VALIDATION_ERROR"
    assert db.query(Task).count() == 0


def test_status_update_is_permissive(db, task, alice):
    # pending -> completed -> working: no transition graph
    updated = task_service.update_status(db, task.id, TaskStatus.COMPLETED, actor_id=alice.id)
    assert updated.status == "completed"

    updated = task_service.update_status(db, task.id, TaskStatus.WORKING, actor_id=alice.id)
    assert updated.status == "working"


def test_pause_reason_stored_and_kept_after_resume(db, task, alice):
    updated = task_service.update_status(db, task.id, TaskStatus.PAUSE, actor_id=alice.id, pause_reason="Waiting on QA")
    assert updated.pause_reason == "Waiting on QA"

    updated = task_service.update_status(db, task.id, TaskStatus.WORKING, actor_id=alice.id)
    assert updated.status == "working"
    assert updated.pause_reason == "Waiting on QA"


def test_pause_without_reason_leaves_reason_unchanged(db, task, alice):
    updated = task_service.update_status(db, task.id, TaskStatus.PAUSE, actor_id=alice.id)

    assert updated.status == "pause"
    assert updated.pause_reason is None


def test_status_update_unknown_task(db, alice):
    with pytest.raises(AppError) as exc_info:
        task_service.update_status(db, 9999, TaskStatus.STARTED, actor_id=alice.id)

    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "NOT_FOUND"


def test_notes_keep_append_order(db, task, alice):
    base = datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc)
    for i, content in enumerate(["first", "second", "third"]):
        task_service.add_note(db, task.id, content, actor_id=alice.id, now=base + timedelta(minutes=i))

    updated = task_service.get_task(db, task.id)

    assert [n.content for n in updated.notes] == ["first", "second", "third"]
    assert [n.position for n in updated.notes] == [0, 1, 2]


@pytest.mark.parametrize("content", [None, "", "   "])
def test_empty_note_rejected(db, task, alice, content):
    with pytest.raises(AppError) as exc_info:
        task_service.add_note(db, task.id, content, actor_id=alice.id)

    assert exc_info.value.code == "EMPTY_CONTENT"
    assert db.query(TaskNote).count() == 0


def test_note_on_unknown_task(db, alice):
    with pytest.raises(AppError) as exc_info:
        task_service.add_note(db, 9999, "hello", actor_id=alice.id)

    assert exc_info.value.code == "NOT_FOUND"


def test_delete_task_removes_notes(db, task, alice):
    task_service.add_note(db, task.id, "note", actor_id=alice.id)

    task_service.delete_task(db, task.id, actor_id=alice.id)

    assert db.query(Task).count() == 0
    assert db.query(TaskNote).count() == 0


def test_delete_missing_task(db, alice):
    with pytest.raises(AppError) as exc_info:
        task_service.delete_task(db, 9999, actor_id=alice.id)

    assert exc_info.value.status_code == 404


# --- HTTP ---


def test_create_task_endpoint(client, alice, bob, bob_headers):
    response = client.post(
        "/api/v1/tasks",
        json={"title": "Write report", "description": "Q1 numbers", "assignedToId": alice.id},
        headers=bob_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"
    assert data["assigned_to"]["name"] == "Alice"
    assert data["assigned_by"]["name"] == "Bob"
    assert data["notes"] == []
    assert data["created_at"].endswith("+05:30")


def test_create_task_endpoint_missing_title(client, alice, bob_headers):
    response = client.post(
        "/api/v1/tasks",
        json={"description": "no title", "assigned_to_id": alice.id},
        headers=bob_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_list_and_get_tasks(client, task, alice_headers):
    response = client.get("/api/v1/tasks", headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total"] == 1

    response = client.get(f"/api/v1/tasks/{task.id}", headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Fix login"

    response = client.get("/api/v1/tasks/9999", headers=alice_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_status_endpoint_accepts_camel_case_pause_reason(client, task, alice_headers):
    response = client.put(
        f"/api/v1/tasks/{task.id}/status",
        json={"status": "pause", "pauseReason": "Blocked"},
        headers=alice_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["pause_reason"] == "Blocked"


def test_status_endpoint_rejects_unknown_status(client, task, alice_headers):
    response = client.put(
        f"/api/v1/tasks/{task.id}/status",
        json={"status": "done"},
        headers=alice_headers,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_note_endpoint(client, task, alice_headers):
    response = client.post(f"/api/v1/tasks/{task.id}/notes", json={"content": "Started"}, headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [n["content"] for n in response.json()["notes"]] == ["Started"]

    response = client.post(f"/api/v1/tasks/{task.id}/notes", json={"content": ""}, headers=alice_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "EMPTY_CONTENT"


def test_delete_endpoint(client, task, alice_headers):
    response = client.delete(f"/api/v1/tasks/{task.id}", headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK

    response = client.delete(f"/api/v1/tasks/{task.id}", headers=alice_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_status_updates_do_not_touch_notes(db, task, alice):
    task_service.add_note(db, task.id, "one", actor_id=alice.id)
    task_service.add_note(db, task.id, "two", actor_id=alice.id)

    task_service.update_status(db, task.id, TaskStatus.PAUSE, actor_id=alice.id, pause_reason="lunch")
    updated = task_service.update_status(db, task.id, TaskStatus.COMPLETED, actor_id=alice.id)

    assert [n.content for n in updated.notes] == ["one", "two"]


def test_racing_note_appends_both_land_in_order(session_pair, monkeypatch):
    first, second = session_pair
    assignee = create_user(first, "assignee@example.com", "secret123", "Assignee")
    assigner = create_user(first, "assigner@example.com", "secret123", "Assigner")
    task = task_service.create_task(first, "Race", "Two writers", assignee.id, assigner.id)

    # The other writer commits position 0 after this one has read max(position)
    real_commit = second.commit
    interleaved = []

    def commit():
        if not interleaved:
            interleaved.append(True)
            task_service.add_note(first, task.id, "from first", actor_id=assignee.id)
        real_commit()

    monkeypatch.setattr(second, "commit", commit)

    updated = task_service.add_note(second, task.id, "from second", actor_id=assigner.id)

    assert [n.content for n in updated.notes] == ["from first", "from second"]
    assert [n.position for n in updated.notes] == [0, 1]
