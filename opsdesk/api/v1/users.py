"""
User directory endpoint (assignee picker)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsdesk.core.deps import get_db, get_current_user
from opsdesk.models.user import User
from opsdesk.schemas.user import UserListResponse
from opsdesk.services.user_service import list_users

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All active users: id, name, email"""
    return UserListResponse(users=list_users(db))
