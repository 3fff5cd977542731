"""
Tests for the approval gate
"""
from datetime import datetime, timezone

import pytest
from fastapi import status

from opsdesk.core.errors import AppError
from opsdesk.models.task import TaskStatus
from opsdesk.services import task_service
from opsdesk.services.approval_service import approve_task
from opsdesk.utils.datetime_utils import ensure_utc


@pytest.fixture
def task(db, alice, bob):
    """Task assigned by Bob to Alice"""
    return task_service.create_task(db, "Ship release", "Tag and publish", alice.id, bob.id)


@pytest.fixture
def completed_task(db, task, alice):
    return task_service.update_status(db, task.id, TaskStatus.COMPLETED, actor_id=alice.id)


@pytest.mark.parametrize("current", ["pending", "started", "working", "pause"])
def test_approve_requires_completed(db, task, bob, current):
    task_service.update_status(db, task.id, TaskStatus(current), actor_id=bob.id)

    with pytest.raises(AppError) as exc_info:
        approve_task(db, task.id, bob.id)

    assert exc_info.value.code == "NOT_COMPLETED"


def test_approve_already_approved_task(db, completed_task, bob):
    approve_task(db, completed_task.id, bob.id)

    with pytest.raises(AppError) as exc_info:
        approve_task(db, completed_task.id, bob.id)

    assert exc_info.value.code == "NOT_COMPLETED"


def test_assignee_cannot_approve_own_task(db, completed_task, alice):
    with pytest.raises(AppError) as exc_info:
        approve_task(db, completed_task.id, alice.id)

    assert exc_info.value.code == "SELF_APPROVAL"
    assert task_service.get_task(db, completed_task.id).status == "completed"


def test_approve_unknown_task(db, bob):
    with pytest.raises(AppError) as exc_info:
        approve_task(db, 9999, bob.id)

    assert exc_info.value.status_code == 404


def test_approve_sets_approval_fields(db, completed_task, bob):
    now = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

    approved = approve_task(db, completed_task.id, bob.id, now=now)

    assert approved.status == "approved"
    assert approved.is_approved is True
    assert approved.approved_by.id == bob.id
    assert ensure_utc(approved.approved_at) == now


def test_status_update_to_approved_goes_through_gate(db, completed_task, alice, bob):
    with pytest.raises(AppError) as exc_info:
        task_service.update_status(db, completed_task.id, TaskStatus.APPROVED, actor_id=alice.id)
    assert exc_info.value.code == "SELF_APPROVAL"

    approved = task_service.update_status(db, completed_task.id, TaskStatus.APPROVED, actor_id=bob.id)
    assert approved.is_approved is True
    assert approved.approved_by_id == bob.id


def test_approve_endpoint(client, completed_task, alice_headers, bob_headers):
    response = client.post(f"/api/v1/tasks/{completed_task.id}/approve", headers=alice_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "SELF_APPROVAL"

    response = client.post(f"/api/v1/tasks/{completed_task.id}/approve", headers=bob_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "approved"
    assert data["approved_by"]["name"] == "Bob"
    assert data["approved_at"].endswith("+05:30")
