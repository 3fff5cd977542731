"""
Attendance endpoints: clock in/out and breaks for the caller's own record of
today, plus day views. Any authenticated user can view everyone's attendance.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from opsdesk.core import constants as codes
from opsdesk.core.deps import get_db, get_current_user
from opsdesk.core.errors import bad_request
from opsdesk.models.user import User
from opsdesk.schemas.attendance import (
    AttendanceRecordOut,
    AttendanceListResponse,
    AttendanceTodayResponse,
    AttendanceSummaryResponse,
)
from opsdesk.schemas.common import MessageResponse
from opsdesk.services import attendance_service

router = APIRouter()


def _require_date(value: Optional[date]) -> date:
    if value is None:
        raise bad_request(codes.MISSING_DATE, "Date parameter required")
    return value


@router.post("/clockin", response_model=AttendanceRecordOut)
async def clock_in_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Clock in for today. 400 ALREADY_CLOCKED_IN on repeat."""
    return attendance_service.clock_in(db, current_user.id)


@router.post("/break/start", response_model=AttendanceRecordOut)
async def break_start_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Start today's break"""
    return attendance_service.break_start(db, current_user.id)


@router.post("/break/end", response_model=AttendanceRecordOut)
async def break_end_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """End today's break; 400 BREAK_TOO_LONG past the limit"""
    return attendance_service.break_end(db, current_user.id)


@router.post("/clockout", response_model=AttendanceRecordOut)
async def clock_out_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Clock out; response carries total_work_minutes"""
    return attendance_service.clock_out(db, current_user.id)


@router.post("/reset-today", response_model=MessageResponse)
async def reset_today_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the caller's own record for today"""
    attendance_service.reset_today(db, current_user.id)
    return MessageResponse(message="Today's attendance has been reset successfully")


@router.get("/today", response_model=AttendanceTodayResponse)
async def today_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Caller's record for today (record is null before clock-in)"""
    return AttendanceTodayResponse(
        work_date=attendance_service.get_work_date(),
        record=attendance_service.get_today(db, current_user.id),
    )


@router.get("/summary", response_model=AttendanceSummaryResponse)
async def summary_endpoint(
    date_: Optional[date] = Query(None, alias="date", description="Local day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Worked and break minutes per user for one day"""
    work_date = _require_date(date_)
    return AttendanceSummaryResponse(summary=attendance_service.summarize_for_date(db, work_date))


@router.get("/user/{user_id}", response_model=AttendanceListResponse)
async def user_attendance_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All records of one user, most recent day first"""
    records = attendance_service.list_for_user(db, user_id)
    return AttendanceListResponse(items=records, total=len(records))


@router.get("", response_model=AttendanceListResponse)
async def list_attendance_endpoint(
    date_: Optional[date] = Query(None, alias="date", description="Local day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every user's record for the day; 400 MISSING_DATE without ?date="""
    work_date = _require_date(date_)
    records = attendance_service.list_for_date(db, work_date)
    return AttendanceListResponse(items=records, total=len(records))
