"""
Task model with its append-only note history
"""
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from opsdesk.db.base import Base


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    STARTED = "started"
    WORKING = "working"
    PAUSE = "pause"
    COMPLETED = "completed"
    APPROVED = "approved"


# Statuses picked up by the archive run
FINISHED_STATUSES = (TaskStatus.COMPLETED.value, TaskStatus.APPROVED.value)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value, index=True)
    pause_reason = Column(Text, nullable=True)  # Kept after leaving pause
    is_approved = Column(Boolean, default=False, nullable=False)
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    notes = relationship(
        "TaskNote",
        back_populates="task",
        order_by="TaskNote.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TaskNote(Base):
    """One entry of a task's note history. Rows are only ever inserted."""
    __tablename__ = "task_notes"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("task_id", "position", name="uq_task_note_position"),
    )

    task = relationship("Task", back_populates="notes")
