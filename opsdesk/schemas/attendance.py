"""
Attendance schemas. All datetimes are returned with the local offset (+05:30).
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from opsdesk.schemas.common import UserBrief, serialize_dt_local


class AttendanceRecordOut(BaseModel):
    """One user's attendance for one local calendar day"""
    id: int
    user_id: int
    user: Optional[UserBrief] = None
    work_date: date
    clock_in: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_work_minutes: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("clock_in", "break_start", "break_end", "clock_out", "created_at", "updated_at", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return serialize_dt_local(dt)


class AttendanceListResponse(BaseModel):
    items: List[AttendanceRecordOut]
    total: int


class AttendanceTodayResponse(BaseModel):
    work_date: date
    record: Optional[AttendanceRecordOut] = None


class AttendanceSummaryItem(BaseModel):
    user: Optional[UserBrief] = None
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_work_minutes: int
    break_minutes: float

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("clock_in", "clock_out", when_used="always")
    def _serialize_datetime_local(self, dt: Optional[datetime]) -> Optional[str]:
        return serialize_dt_local(dt)


class AttendanceSummaryResponse(BaseModel):
    summary: List[AttendanceSummaryItem]
