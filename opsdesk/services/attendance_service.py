"""
Attendance clock service: clock in, break start/end, clock out and reset for
the caller's record of the current local (+05:30) work day.

All timestamps are server UTC time. Each transition is written with a
conditional UPDATE (the field must still be unset) so two concurrent requests
for the same user-day cannot both succeed.
"""
import logging
import math
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from opsdesk.core import constants as codes
from opsdesk.core.config import settings
from opsdesk.core.errors import AppError, bad_request
from opsdesk.models.attendance import AttendanceRecord
from opsdesk.services.audit_service import log_audit
from opsdesk.utils.datetime_utils import now_utc, ensure_utc, local_date, elapsed_minutes

_log = logging.getLogger(__name__)


def get_work_date(utc_now: Optional[datetime] = None) -> date:
    """Return work_date (local calendar day) for the given UTC time (default now)."""
    return local_date(utc_now)


def calculate_total_work_minutes(
    clock_in: datetime,
    clock_out: datetime,
    break_start: Optional[datetime] = None,
    break_end: Optional[datetime] = None,
) -> int:
    """Worked minutes between clock in and out, minus a completed break, floored."""
    total = elapsed_minutes(clock_in, clock_out)
    if break_start is not None and break_end is not None:
        total -= elapsed_minutes(break_start, break_end)
    return max(0, math.floor(total))


def _get_record(db: Session, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
    return (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.work_date == work_date,
        )
        .first()
    )


def _resolve_now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else now_utc()


def _apply(
    db: Session,
    record: AttendanceRecord,
    guards: list,
    values: Dict[str, object],
    check: Callable[[AttendanceRecord], None],
    lost_race: Callable[[], AppError],
) -> AttendanceRecord:
    """
    UPDATE the record only while `guards` still hold. When no row matches,
    another request changed the record after we read it: re-check against the
    fresh state so the caller sees the precise failure.
    """
    updated = (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.id == record.id, *guards)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        fresh = db.query(AttendanceRecord).filter(AttendanceRecord.id == record.id).first()
        check(fresh)
        raise lost_race()
    db.commit()
    db.refresh(record)
    return record


# --- Preconditions ---


def _already_clocked_in() -> AppError:
    return bad_request(codes.ALREADY_CLOCKED_IN, "Already clocked in today")


def _check_clock_in(record: Optional[AttendanceRecord]) -> None:
    if record is not None and record.clock_in is not None:
        raise _already_clocked_in()


def _check_break_start(record: Optional[AttendanceRecord]) -> None:
    if record is None or record.clock_in is None:
        raise bad_request(codes.NOT_CLOCKED_IN, "Must clock in before taking a break")
    if record.break_start is not None:
        raise bad_request(codes.BREAK_ALREADY_STARTED, "Break already started")


def _check_break_end(record: Optional[AttendanceRecord]) -> None:
    if record is None or record.break_start is None:
        raise bad_request(codes.BREAK_NOT_STARTED, "Break not started")
    if record.break_end is not None:
        raise bad_request(codes.BREAK_ALREADY_ENDED, "Break already ended")


def _check_clock_out(record: Optional[AttendanceRecord]) -> None:
    if record is None or record.clock_in is None:
        raise bad_request(codes.NOT_CLOCKED_IN, "Must clock in before clocking out")
    if record.clock_out is not None:
        raise bad_request(codes.ALREADY_CLOCKED_OUT, "Already clocked out")
    if record.break_start is not None and record.break_end is None:
        raise bad_request(codes.BREAK_IN_PROGRESS, "Must end break before clocking out")


def _check_not_before_last_stamp(record: AttendanceRecord, now: datetime) -> None:
    """Keep clock_in <= break_start <= break_end <= clock_out when `now` is injected."""
    stamps = [ensure_utc(s) for s in (record.clock_in, record.break_start, record.break_end) if s is not None]
    if stamps and now < max(stamps):
        raise bad_request(
            codes.TIMESTAMP_BEFORE_LAST_EVENT,
            "Time is earlier than the last recorded attendance event",
        )


# --- Transitions ---


def clock_in(db: Session, user_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    """
    Clock in: load or create today's record and set clock_in.
    Fails ALREADY_CLOCKED_IN if clock_in is already set.
    """
    now = _resolve_now(now)
    work_date = get_work_date(now)

    record = _get_record(db, user_id, work_date)
    _check_clock_in(record)

    if record is None:
        record = AttendanceRecord(
            user_id=user_id,
            work_date=work_date,
            clock_in=now,
            total_work_minutes=0,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent clock-in created the (user_id, work_date) row first
            db.rollback()
            _log.info("clock_in lost race: user_id=%s work_date=%s", user_id, work_date)
            raise _already_clocked_in()
        db.refresh(record)
    else:
        record = _apply(
            db, record,
            [AttendanceRecord.clock_in.is_(None)],
            {"clock_in": now},
            _check_clock_in,
            _already_clocked_in,
        )

    _log.info("clock_in: user_id=%s work_date=%s record_id=%s", user_id, work_date, record.id)
    log_audit(
        db=db,
        actor_id=user_id,
        action="ATTENDANCE_CLOCK_IN",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"work_date": work_date, "clock_in": now},
    )
    return record


def break_start(db: Session, user_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    """Start the day's single break. Requires clock-in; fails if a break was already started."""
    now = _resolve_now(now)
    work_date = get_work_date(now)

    record = _get_record(db, user_id, work_date)
    _check_break_start(record)
    _check_not_before_last_stamp(record, now)

    record = _apply(
        db, record,
        [AttendanceRecord.break_start.is_(None)],
        {"break_start": now},
        _check_break_start,
        lambda: bad_request(codes.BREAK_ALREADY_STARTED, "Break already started"),
    )

    _log.info("break_start: user_id=%s work_date=%s", user_id, work_date)
    log_audit(
        db=db,
        actor_id=user_id,
        action="ATTENDANCE_BREAK_START",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"work_date": work_date, "break_start": now},
    )
    return record


def break_end(db: Session, user_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    """
    End the break. The length limit is only checked here: a break that ran
    past MAX_BREAK_MINUTES is rejected with BREAK_TOO_LONG and stays open.
    """
    now = _resolve_now(now)
    work_date = get_work_date(now)

    record = _get_record(db, user_id, work_date)
    _check_break_end(record)
    _check_not_before_last_stamp(record, now)

    break_minutes = elapsed_minutes(record.break_start, now)
    if break_minutes > settings.MAX_BREAK_MINUTES:
        _log.warning(
            "break_end rejected: user_id=%s work_date=%s break_minutes=%.1f",
            user_id, work_date, break_minutes,
        )
        raise bad_request(
            codes.BREAK_TOO_LONG,
            f"Break duration cannot exceed {settings.MAX_BREAK_MINUTES} minutes",
        )

    record = _apply(
        db, record,
        [AttendanceRecord.break_end.is_(None)],
        {"break_end": now},
        _check_break_end,
        lambda: bad_request(codes.BREAK_ALREADY_ENDED, "Break already ended"),
    )

    _log.info("break_end: user_id=%s work_date=%s break_minutes=%.1f", user_id, work_date, break_minutes)
    log_audit(
        db=db,
        actor_id=user_id,
        action="ATTENDANCE_BREAK_END",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"work_date": work_date, "break_end": now},
    )
    return record


def clock_out(db: Session, user_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    """Clock out and compute total_work_minutes. Refused while a break is open."""
    now = _resolve_now(now)
    work_date = get_work_date(now)

    record = _get_record(db, user_id, work_date)
    _check_clock_out(record)
    _check_not_before_last_stamp(record, now)

    total = calculate_total_work_minutes(record.clock_in, now, record.break_start, record.break_end)

    record = _apply(
        db, record,
        [
            AttendanceRecord.clock_out.is_(None),
            or_(AttendanceRecord.break_start.is_(None), AttendanceRecord.break_end.isnot(None)),
        ],
        {"clock_out": now, "total_work_minutes": total},
        _check_clock_out,
        lambda: bad_request(codes.ALREADY_CLOCKED_OUT, "Already clocked out"),
    )

    _log.info("clock_out: user_id=%s work_date=%s total_work_minutes=%s", user_id, work_date, total)
    log_audit(
        db=db,
        actor_id=user_id,
        action="ATTENDANCE_CLOCK_OUT",
        entity_type="attendance_records",
        entity_id=record.id,
        meta={"work_date": work_date, "clock_out": now, "total_work_minutes": total},
    )
    return record


def reset_today(db: Session, user_id: int, now: Optional[datetime] = None) -> None:
    """Delete the caller's record for today. Fails NO_RECORD_FOUND when there is nothing to reset."""
    work_date = get_work_date(_resolve_now(now))

    deleted = (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.work_date == work_date,
        )
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise bad_request(codes.NO_RECORD_FOUND, "No attendance record found for today")
    db.commit()

    _log.info("reset_today: user_id=%s work_date=%s", user_id, work_date)
    log_audit(
        db=db,
        actor_id=user_id,
        action="ATTENDANCE_RESET_TODAY",
        entity_type="attendance_records",
        meta={"work_date": work_date},
    )


# --- Queries ---


def get_today(db: Session, user_id: int, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
    """Caller's record for today, if any."""
    return _get_record(db, user_id, get_work_date(_resolve_now(now)))


def list_for_date(db: Session, work_date: date) -> List[AttendanceRecord]:
    """Every user's record for the day (no per-user restriction), newest first."""
    return (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.user))
        .filter(AttendanceRecord.work_date == work_date)
        .order_by(AttendanceRecord.created_at.desc(), AttendanceRecord.id.desc())
        .all()
    )


def list_for_user(db: Session, user_id: int) -> List[AttendanceRecord]:
    """All records of one user, most recent day first."""
    return (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.user))
        .filter(AttendanceRecord.user_id == user_id)
        .order_by(AttendanceRecord.work_date.desc())
        .all()
    )


def break_minutes_of(record: AttendanceRecord) -> float:
    if record.break_start is None or record.break_end is None:
        return 0
    return elapsed_minutes(record.break_start, record.break_end)


def summarize_for_date(db: Session, work_date: date) -> List[dict]:
    """Per-record summary for the day: clock times, worked and break minutes."""
    return [
        {
            "user": record.user,
            "work_date": record.work_date,
            "clock_in": record.clock_in,
            "clock_out": record.clock_out,
            "total_work_minutes": record.total_work_minutes,
            "break_minutes": break_minutes_of(record),
        }
        for record in list_for_date(db, work_date)
    ]
