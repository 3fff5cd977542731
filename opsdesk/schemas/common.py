"""
Shared response schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from opsdesk.utils.datetime_utils import iso_local


class MessageResponse(BaseModel):
    message: str


class UserBrief(BaseModel):
    """Referenced user, populated on records and tasks"""
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


def serialize_dt_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize datetime with the local offset (+05:30) for API responses."""
    return iso_local(dt)
