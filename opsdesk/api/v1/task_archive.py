"""
Task archive endpoints. Registered ahead of the tasks router so that
/tasks/archive is not captured by /tasks/{task_id}.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from opsdesk.core.deps import get_db, get_current_user
from opsdesk.models.user import User
from opsdesk.schemas.task_archive import ArchiveResult, ArchiveListResponse, ArchiveGroupsResponse
from opsdesk.services import archive_service

router = APIRouter()


@router.post("", response_model=ArchiveResult)
async def archive_tasks_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Move every completed/approved task into the archive"""
    return archive_service.archive_finished(db, actor_id=current_user.id)


@router.get("/all", response_model=ArchiveGroupsResponse)
async def all_archives_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All archives grouped by local day of archival"""
    archives = archive_service.list_archived(db)
    return ArchiveGroupsResponse(
        archives=archive_service.group_by_day(archives),
        total_archives=len(archives),
    )


@router.get("", response_model=ArchiveListResponse)
async def archives_by_day_endpoint(
    date_: Optional[date] = Query(None, alias="date", description="Local day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Archives of one local day; all archives when no date is given"""
    return ArchiveListResponse(archives=archive_service.list_archived(db, date_))
