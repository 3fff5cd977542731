"""
Task lifecycle service: create, status updates, notes, delete.

Status writes are permissive: any TaskStatus may be written by any
authenticated user. The only guarded step is approval, which is always
routed through the approval gate.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from opsdesk.core import constants as codes
from opsdesk.core.errors import bad_request, not_found
from opsdesk.models.task import Task, TaskNote, TaskStatus
from opsdesk.models.user import User
from opsdesk.services import approval_service
from opsdesk.services.audit_service import log_audit
from opsdesk.utils.datetime_utils import now_utc, ensure_utc

_log = logging.getLogger(__name__)

# Attempts at claiming the next note position when appends race
_NOTE_APPEND_ATTEMPTS = 3


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def get_task(db: Session, task_id: int) -> Task:
    """Load a task with its users, or fail NOT_FOUND."""
    task = (
        db.query(Task)
        .options(
            joinedload(Task.assigned_to),
            joinedload(Task.assigned_by),
            joinedload(Task.approved_by),
        )
        .filter(Task.id == task_id)
        .first()
    )
    if task is None:
        raise not_found(codes.NOT_FOUND, "Task not found")
    return task


def list_tasks(db: Session) -> List[Task]:
    """All live tasks, newest first."""
    return (
        db.query(Task)
        .options(
            joinedload(Task.assigned_to),
            joinedload(Task.assigned_by),
            joinedload(Task.approved_by),
        )
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


def create_task(
    db: Session,
    title: Optional[str],
    description: Optional[str],
    assigned_to_id: Optional[int],
    assigned_by_id: int,
) -> Task:
    """
    Create a task in the initial status with an empty note history.

    Raises:
        AppError(VALIDATION_ERROR): a required field is missing or the assignee is unknown
    """
    missing = [
        name
        for name, value in (
            ("title", title),
            ("description", description),
            ("assigned_to_id", assigned_to_id),
        )
        if _blank(value)
    ]
    if missing:
        raise bad_request(codes.VALIDATION_ERROR, f"Missing required fields: {', '.join(missing)}")

    assignee = db.query(User).filter(User.id == assigned_to_id, User.active.is_(True)).first()
    if assignee is None:
        raise bad_request(codes.VALIDATION_ERROR, "Assigned user not found")

    task = Task(
        title=title,
        description=description,
        assigned_to_id=assigned_to_id,
        assigned_by_id=assigned_by_id,
        status=TaskStatus.PENDING.value,
        is_approved=False,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    _log.info("task created: task_id=%s assigned_to=%s assigned_by=%s", task.id, assigned_to_id, assigned_by_id)
    log_audit(
        db=db,
        actor_id=assigned_by_id,
        action="TASK_CREATE",
        entity_type="tasks",
        entity_id=task.id,
        meta={"title": title, "assigned_to_id": assigned_to_id},
    )
    return get_task(db, task.id)


def update_status(
    db: Session,
    task_id: int,
    new_status: TaskStatus,
    actor_id: int,
    pause_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Task:
    """
    Write new_status unconditionally. pause_reason is stored when moving to
    pause with a reason, and is left in place when the task leaves pause.
    Moving to approved goes through approve_task with the caller as approver.
    """
    new_status = TaskStatus(new_status)
    if new_status == TaskStatus.APPROVED:
        return approval_service.approve_task(db, task_id, actor_id, now=now)

    task = get_task(db, task_id)
    old_status = task.status
    task.status = new_status.value
    if new_status == TaskStatus.PAUSE and not _blank(pause_reason):
        task.pause_reason = pause_reason
    db.commit()

    _log.info("task status: task_id=%s %s -> %s", task_id, old_status, new_status.value)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="TASK_STATUS_UPDATE",
        entity_type="tasks",
        entity_id=task_id,
        meta={"old_status": old_status, "new_status": new_status, "pause_reason": pause_reason},
    )
    return get_task(db, task_id)


def add_note(
    db: Session,
    task_id: int,
    content: Optional[str],
    actor_id: int,
    now: Optional[datetime] = None,
) -> Task:
    """Append {content, created_at} to the end of the task's note history."""
    if _blank(content):
        raise bad_request(codes.EMPTY_CONTENT, "Note content is required")

    get_task(db, task_id)
    created_at = ensure_utc(now) if now is not None else now_utc()

    for attempt in range(1, _NOTE_APPEND_ATTEMPTS + 1):
        last_position = (
            db.query(func.max(TaskNote.position))
            .filter(TaskNote.task_id == task_id)
            .scalar()
        )
        position = 0 if last_position is None else last_position + 1
        db.add(TaskNote(task_id=task_id, position=position, content=content, created_at=created_at))
        try:
            db.commit()
            break
        except IntegrityError:
            # Another append took this position
            db.rollback()
            if attempt == _NOTE_APPEND_ATTEMPTS:
                raise
            _log.debug("note position %s taken on task_id=%s, retrying", position, task_id)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="TASK_NOTE_ADD",
        entity_type="tasks",
        entity_id=task_id,
        meta={"position": position},
    )
    return get_task(db, task_id)


def delete_task(db: Session, task_id: int, actor_id: int) -> None:
    """Hard delete a live task and its notes. Archived copies are not affected."""
    task = get_task(db, task_id)
    db.delete(task)
    db.commit()

    _log.info("task deleted: task_id=%s by user_id=%s", task_id, actor_id)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="TASK_DELETE",
        entity_type="tasks",
        entity_id=task_id,
    )
