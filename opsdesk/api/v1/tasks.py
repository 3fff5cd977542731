"""
Task endpoints: create, list, status updates, notes, approval, delete
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsdesk.core.deps import get_db, get_current_user
from opsdesk.models.user import User
from opsdesk.schemas.common import MessageResponse
from opsdesk.schemas.task import (
    TaskCreate,
    TaskStatusUpdate,
    NoteCreate,
    TaskOut,
    TaskListResponse,
)
from opsdesk.services import task_service
from opsdesk.services.approval_service import approve_task

router = APIRouter()


@router.post("", response_model=TaskOut, status_code=201)
async def create_task_endpoint(
    body: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a task assigned by the caller"""
    return task_service.create_task(
        db,
        title=body.title,
        description=body.description,
        assigned_to_id=body.assigned_to_id,
        assigned_by_id=current_user.id,
    )


@router.get("", response_model=TaskListResponse)
async def list_tasks_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All live tasks, newest first"""
    tasks = task_service.list_tasks(db)
    return TaskListResponse(items=tasks, total=len(tasks))


@router.get("/{task_id}", response_model=TaskOut)
async def get_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.get_task(db, task_id)


@router.put("/{task_id}/status", response_model=TaskOut)
async def update_status_endpoint(
    task_id: int,
    body: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Write any status; `approved` is checked like POST /approve"""
    return task_service.update_status(
        db,
        task_id,
        body.status,
        actor_id=current_user.id,
        pause_reason=body.pause_reason,
    )


@router.post("/{task_id}/approve", response_model=TaskOut)
async def approve_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Approve a completed task assigned to someone else"""
    return approve_task(db, task_id, current_user.id)


@router.post("/{task_id}/notes", response_model=TaskOut)
async def add_note_endpoint(
    task_id: int,
    body: NoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append a progress note"""
    return task_service.add_note(db, task_id, body.content, actor_id=current_user.id)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task_service.delete_task(db, task_id, actor_id=current_user.id)
    return MessageResponse(message="Task deleted successfully")
