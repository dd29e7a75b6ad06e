"""
CuriousDog Backend — User Request/Response Schemas
====================================================

What:  API contract for registration, login, and profile endpoints.
Who:   auth and users routes; UserService builds the responses.

Exposure rules:
    - UserProfile is the public projection {id, username, profile_picture}.
      It is what other users see, including on question cards.
    - UserResponse adds email and is only returned to the account owner.
    - password_hash never appears in any schema.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import ensure_utc

USERNAME_PATTERN = r"^[A-Za-z0-9_.]{3,30}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PASSWORD_SPECIALS = re.compile(r"[\-_=.#^()+`~'\",<>/\[\]{};:|\\@$!%*?&]")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """
    What:  Body of POST /api/auth/register.

    Password policy (mirrors the registration form badges):
        at least 8 characters, one upper-case letter, one lower-case letter,
        one special character.
    """
    username: str = Field(pattern=USERNAME_PATTERN, description="3-30 letters, digits, '_' or '.'")
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        missing = []
        if not re.search(r"[A-Z]", v):
            missing.append("a capital letter")
        if not re.search(r"[a-z]", v):
            missing.append("a small letter")
        if not PASSWORD_SPECIALS.search(v):
            missing.append("a special character")
        if missing:
            raise ValueError("Password must contain " + ", ".join(missing))
        return v


class LoginRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserUpdateRequest(BaseModel):
    """Body of PATCH /api/users/me. Only the username is editable."""
    username: Optional[str] = Field(default=None, pattern=USERNAME_PATTERN)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserProfile(BaseModel):
    """Public projection of a user, safe to show to anyone."""
    id: int
    username: str
    profile_picture: Optional[str] = Field(
        default=None,
        description="URL path of the profile picture (null when none uploaded)",
    )

    model_config = {"from_attributes": True}


class UserResponse(UserProfile):
    """Full account view for the account owner."""
    email: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class AuthResponse(BaseModel):
    """Returned by register and login: the bearer token plus the account."""
    token: str = Field(description="JWT to send as 'Authorization: Bearer <token>'")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserResponse
