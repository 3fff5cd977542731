"""
Approval gate: the only guarded task transition.

A task can be approved only from `completed`, and only by someone other than
the user it is assigned to.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from opsdesk.core import constants as codes
from opsdesk.core.errors import bad_request, not_found
from opsdesk.models.task import Task, TaskStatus
from opsdesk.services.audit_service import log_audit
from opsdesk.utils.datetime_utils import now_utc, ensure_utc

_log = logging.getLogger(__name__)


def _not_completed():
    return bad_request(codes.NOT_COMPLETED, "Task must be completed before approval")


def approve_task(
    db: Session,
    task_id: int,
    approver_id: int,
    now: Optional[datetime] = None,
) -> Task:
    """
    Approve a completed task.

    Raises:
        AppError(NOT_FOUND): no such task
        AppError(NOT_COMPLETED): status is not completed
        AppError(SELF_APPROVAL): approver is the assignee
    """
    now = ensure_utc(now) if now is not None else now_utc()

    task = db.query(Task).filter(Task.id == task_id).first()
    if task is None:
        raise not_found(codes.NOT_FOUND, "Task not found")
    if task.status != TaskStatus.COMPLETED.value:
        raise _not_completed()
    if task.assigned_to_id == approver_id:
        _log.warning("self approval refused: task_id=%s user_id=%s", task_id, approver_id)
        raise bad_request(codes.SELF_APPROVAL, "Cannot approve your own task")

    # Only flips a task that is still completed at write time
    updated = (
        db.query(Task)
        .filter(Task.id == task_id, Task.status == TaskStatus.COMPLETED.value)
        .update(
            {
                "status": TaskStatus.APPROVED.value,
                "is_approved": True,
                "approved_by_id": approver_id,
                "approved_at": now,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        raise _not_completed()
    db.commit()

    _log.info("task approved: task_id=%s approver_id=%s", task_id, approver_id)
    log_audit(
        db=db,
        actor_id=approver_id,
        action="TASK_APPROVE",
        entity_type="tasks",
        entity_id=task_id,
        meta={"approved_at": now},
    )
    return (
        db.query(Task)
        .options(
            joinedload(Task.assigned_to),
            joinedload(Task.assigned_by),
            joinedload(Task.approved_by),
        )
        .filter(Task.id == task_id)
        .one()
    )
