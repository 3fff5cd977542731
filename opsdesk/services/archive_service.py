"""
Task archive service.

archive_finished copies every completed/approved task (notes included) into
task_archives and deletes exactly the copied tasks in one transaction: either
all matched tasks move, or none do.
"""
import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from opsdesk.models.task import Task, FINISHED_STATUSES
from opsdesk.models.task_archive import TaskArchive, TaskArchiveNote
from opsdesk.schemas.task_archive import ArchiveResult
from opsdesk.services.audit_service import log_audit
from opsdesk.utils.datetime_utils import now_utc, ensure_utc, local_date, local_day_bounds

_log = logging.getLogger(__name__)


def _snapshot(task: Task, archived_at: datetime) -> TaskArchive:
    return TaskArchive(
        original_task_id=task.id,
        title=task.title,
        description=task.description,
        assigned_to_id=task.assigned_to_id,
        assigned_by_id=task.assigned_by_id,
        status=task.status,
        pause_reason=task.pause_reason,
        is_approved=task.is_approved,
        approved_by_id=task.approved_by_id,
        approved_at=task.approved_at,
        task_created_at=task.created_at,
        archived_at=archived_at,
        notes=[
            TaskArchiveNote(position=note.position, content=note.content, created_at=note.created_at)
            for note in task.notes
        ],
    )


def archive_finished(db: Session, actor_id: int, now: Optional[datetime] = None) -> ArchiveResult:
    """
    Move all completed/approved tasks into the archive.

    Returns a zero count (not an error) when nothing is finished. Any failure
    rolls the whole run back and propagates.
    """
    archived_at = ensure_utc(now) if now is not None else now_utc()

    # FOR UPDATE keeps matched rows from changing status mid-run (no-op on SQLite)
    tasks = (
        db.query(Task)
        .options(selectinload(Task.notes))
        .filter(Task.status.in_(FINISHED_STATUSES))
        .order_by(Task.id)
        .with_for_update()
        .all()
    )
    if not tasks:
        db.rollback()
        _log.info("archive_finished: nothing to archive")
        return ArchiveResult(archived_count=0, message="No completed or approved tasks to archive")

    task_ids = [task.id for task in tasks]
    try:
        db.add_all([_snapshot(task, archived_at) for task in tasks])
        for task in tasks:
            db.delete(task)
        db.commit()
    except Exception:
        db.rollback()
        _log.exception("archive_finished failed; rolled back %s tasks", len(task_ids))
        raise

    _log.info("archive_finished: archived %s tasks %s", len(task_ids), task_ids)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="TASK_ARCHIVE",
        entity_type="tasks",
        meta={"task_ids": task_ids, "archived_at": archived_at},
    )
    return ArchiveResult(archived_count=len(task_ids), message="Tasks archived successfully")


def list_archived(db: Session, day: Optional[date] = None) -> List[TaskArchive]:
    """Archived tasks newest first, optionally limited to one local calendar day of archived_at."""
    query = db.query(TaskArchive).options(
        joinedload(TaskArchive.assigned_to),
        joinedload(TaskArchive.assigned_by),
        joinedload(TaskArchive.approved_by),
    )
    if day is not None:
        start, end = local_day_bounds(day)
        query = query.filter(TaskArchive.archived_at >= start, TaskArchive.archived_at < end)
    return query.order_by(TaskArchive.archived_at.desc(), TaskArchive.id.desc()).all()


def group_by_day(archives: Iterable[TaskArchive]) -> Dict[str, List[TaskArchive]]:
    """Group archives by local calendar day (YYYY-MM-DD) of archived_at, keeping input order."""
    grouped: Dict[str, List[TaskArchive]] = OrderedDict()
    for archive in archives:
        key = local_date(ensure_utc(archive.archived_at)).isoformat()
        grouped.setdefault(key, []).append(archive)
    return grouped
