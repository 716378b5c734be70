"""
CallBoard Backend — Auth & User Schemas
=========================================

What:  Request bodies for register/login and the profile payloads returned by
       the auth and user routes.
"""

import uuid
from typing import List

from pydantic import EmailStr, Field

from app.schemas.call import CallResponse
from app.schemas.common import CamelModel, StrictCamelModel


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(StrictCamelModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=255)
    second_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=72)


class LoginRequest(StrictCamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class RegisterResponse(CamelModel):
    """Returned by POST /auth/register with HTTP 201."""
    email: str
    phone: str
    first_name: str
    second_name: str
    id: uuid.UUID


class UserProfile(CamelModel):
    """The authenticated user's own profile, including embedded snapshots."""
    email: str
    first_name: str
    second_name: str
    phone: str
    avatar_url: str
    id: uuid.UUID
    favourites: List[CallResponse] = Field(default_factory=list)
    calls: List[CallResponse] = Field(default_factory=list)


class LoginResponse(CamelModel):
    token: str
    user: UserProfile


class PublicProfile(CamelModel):
    """What anyone may see about another user (GET /user/{userId})."""
    email: str
    first_name: str
    second_name: str
    avatar: str
    phone: str


class AvatarResponse(CamelModel):
    avatar_url: str


class Creator(CamelModel):
    """A member of the team that built the marketplace."""
    first_name: str
    second_name: str
    tasks: str
    avatar: str
