"""
User schemas
"""
from typing import List

from pydantic import BaseModel

from opsdesk.schemas.common import UserBrief


class UserListResponse(BaseModel):
    users: List[UserBrief]
