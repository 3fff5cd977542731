"""
Task archive schemas
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from opsdesk.schemas.common import UserBrief, serialize_dt_local
from opsdesk.schemas.task import TaskNoteOut


class ArchiveResult(BaseModel):
    archived_count: int
    message: str


class TaskArchiveOut(BaseModel):
    id: int
    original_task_id: int
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
    task_created_at: datetime
    archived_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("approved_at", "task_created_at", "archived_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return serialize_dt_local(dt)


class ArchiveListResponse(BaseModel):
    archives: List[TaskArchiveOut]


class ArchiveGroupsResponse(BaseModel):
    """Archives keyed by local calendar day (YYYY-MM-DD) of archived_at"""
    archives: Dict[str, List[TaskArchiveOut]]
    total_archives: int
