"""
Authentication schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator

from opsdesk.core.security import validate_password
from opsdesk.schemas.common import UserBrief


class LoginRequest(BaseModel):
    """Login request schema"""
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Password")


class RegisterRequest(BaseModel):
    """Registration request schema"""
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Password (min 6 characters)")
    name: str = Field(..., min_length=1, description="Display name")

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"
    user: UserBrief
