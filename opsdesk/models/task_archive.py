"""
Task archive models: write-once snapshots of finished tasks
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from opsdesk.db.base import Base


class TaskArchive(Base):
    __tablename__ = "task_archives"

    id = Column(Integer, primary_key=True, index=True)
    original_task_id = Column(Integer, nullable=False, index=True)  # No FK: the live task is deleted
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False)
    pause_reason = Column(Text, nullable=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    task_created_at = Column(DateTime(timezone=True), nullable=False)
    archived_at = Column(DateTime(timezone=True), nullable=False, index=True)

    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    notes = relationship(
        "TaskArchiveNote",
        back_populates="archive",
        order_by="TaskArchiveNote.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TaskArchiveNote(Base):
    __tablename__ = "task_archive_notes"

    id = Column(Integer, primary_key=True, index=True)
    archive_id = Column(Integer, ForeignKey("task_archives.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    archive = relationship("TaskArchive", back_populates="notes")
