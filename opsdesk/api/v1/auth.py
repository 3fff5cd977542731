"""
Authentication endpoints
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsdesk.core.deps import get_db, get_current_user
from opsdesk.core.security import create_access_token
from opsdesk.models.user import User
from opsdesk.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from opsdesk.schemas.common import UserBrief
from opsdesk.services.audit_service import log_audit
from opsdesk.services.user_service import authenticate, create_user

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_for(user: User) -> TokenResponse:
    # JWT 'sub' claim must be a string
    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return TokenResponse(access_token=access_token, token_type="bearer", user=UserBrief.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a bearer token for it"""
    user = create_user(db, body.email, body.password, body.name)
    log_audit(db=db, actor_id=user.id, action="AUTH_REGISTER", entity_type="users", entity_id=user.id)
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token

    Validates email and password, rejects inactive users.
    """
    user = authenticate(db, login_data.email, login_data.password)

    # Don't fail login if audit fails
    try:
        log_audit(
            db=db,
            actor_id=user.id,
            action="AUTH_LOGIN_SUCCESS",
            entity_type="auth",
            meta={"email": user.email},
        )
    except Exception as e:
        db.rollback()
        logger.warning("Failed to log audit for login: %s", e)

    return _token_for(user)


@router.get("/me", response_model=UserBrief)
async def me(current_user: User = Depends(get_current_user)):
    """Current authenticated user"""
    return current_user
