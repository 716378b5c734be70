"""
CallBoard Backend — User Route Handlers
=========================================

What:  Own profile, public profiles, avatar upload/reset and the team roster.

Route order matters: /user/creators and /user/avatar are declared before
/user/{userId} so they are not captured by the path parameter.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Path, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_auth_context
from app.schemas.common import ErrorResponse
from app.schemas.user import AvatarResponse, Creator, PublicProfile, UserProfile
from app.services.auth_service import AuthContext
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User"])

_AUTH_ERRORS = {
    400: {"description": "No token provided", "model": ErrorResponse},
    401: {"description": "Invalid token", "model": ErrorResponse},
    404: {"description": "Invalid user or session", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=UserProfile,
    responses=_AUTH_ERRORS,
    summary="Current user's profile",
)
async def get_profile(context: AuthContext = Depends(get_auth_context)) -> UserProfile:
    return user_service.get_profile(context.user)


@router.get(
    "/creators",
    response_model=List[Creator],
    summary="The team that built the marketplace",
)
async def get_creators() -> List[Creator]:
    return user_service.list_creators()


@router.patch(
    "/avatar",
    response_model=AvatarResponse,
    responses={
        **_AUTH_ERRORS,
        415: {"description": "Not an image", "model": ErrorResponse},
        503: {"description": "Image host unavailable", "model": ErrorResponse},
    },
    summary="Upload a new avatar",
    description="Multipart upload with a single `file` part. The image is stored on the image host.",
)
async def update_avatar(
    file: Optional[UploadFile] = File(default=None, description="Avatar image"),
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> AvatarResponse:
    return await user_service.update_avatar(db, context.user, file)


@router.delete(
    "/avatar",
    response_model=AvatarResponse,
    responses=_AUTH_ERRORS,
    summary="Restore the default avatar",
)
async def reset_avatar(
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> AvatarResponse:
    return await user_service.reset_avatar(db, context.user)


@router.get(
    "/{userId}",
    response_model=PublicProfile,
    responses={
        400: {"description": "Malformed user id", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Another user's public profile",
)
async def get_public_profile(
    user_id: uuid.UUID = Path(alias="userId"),
    db: AsyncSession = Depends(get_db_session),
) -> PublicProfile:
    return await user_service.get_public_profile(db, user_id)
