"""
Database models
"""
from opsdesk.models.user import User
from opsdesk.models.audit_log import AuditLog
from opsdesk.models.attendance import AttendanceRecord
from opsdesk.models.task import Task, TaskNote, TaskStatus, FINISHED_STATUSES
from opsdesk.models.task_archive import TaskArchive, TaskArchiveNote

__all__ = [
    "User",
    "AuditLog",
    "AttendanceRecord",
    "Task",
    "TaskNote",
    "TaskStatus",
    "FINISHED_STATUSES",
    "TaskArchive",
    "TaskArchiveNote",
]
