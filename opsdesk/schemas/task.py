"""
Task schemas. Request fields also accept the camelCase names used by the web client.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from opsdesk.models.task import TaskStatus
from opsdesk.schemas.common import UserBrief, serialize_dt_local


class TaskCreate(BaseModel):
    """Missing fields are reported by the service as VALIDATION_ERROR (400), not 422."""
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to_id: Optional[int] = Field(None, alias="assignedToId")

    model_config = ConfigDict(populate_by_name=True)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
    pause_reason: Optional[str] = Field(None, alias="pauseReason")

    model_config = ConfigDict(populate_by_name=True)


class NoteCreate(BaseModel):
    content: Optional[str] = None


class TaskNoteOut(BaseModel):
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return serialize_dt_local(dt)


class TaskOut(BaseModel):
    id: int
    title: str
    description: str
    assigned_to_id: int
    assigned_by_id: int
    assigned_to: Optional[UserBrief] = None
    assigned_by: Optional[UserBrief] = None
    status: str
    pause_reason: Optional[str] = None
    notes: List[TaskNoteOut] = []
    is_approved: bool
    approved_by_id: Optional[int] = None
    approved_by: Optional[UserBrief] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("approved_at", "created_at", "updated_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return serialize_dt_local(dt)


class TaskListResponse(BaseModel):
    items: List[TaskOut]
    total: int
