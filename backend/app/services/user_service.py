"""
CallBoard Backend — User Service
==================================

What:  Profile reads and avatar management.
Who:   Called by the /user routes; `build_profile` is shared with AuthService
       so the login response and GET /user return the same shape.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.config import settings
from app.exceptions import NotFoundError, UnsupportedMediaTypeError, ValidationError
from app.models.user import User
from app.schemas.user import AvatarResponse, Creator, PublicProfile, UserProfile
from app.services.catalog import CREATORS
from app.services.image_service import image_service

logger = logging.getLogger(__name__)


def build_profile(user: User) -> UserProfile:
    return UserProfile(
        email=user.email,
        first_name=user.first_name,
        second_name=user.second_name,
        phone=user.phone,
        avatar_url=user.avatar_url,
        id=user.id,
        favourites=list(user.favourites or []),
        calls=list(user.calls or []),
    )


class UserService:

    def get_profile(self, user: User) -> UserProfile:
        return build_profile(user)

    async def get_public_profile(self, db: AsyncSession, user_id: uuid.UUID) -> PublicProfile:
        """
        Public card for any user.

        Raises:
            NotFoundError: no user with that id (→ 404 "User not found")
        """
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(message="User not found", resource="user", resource_id=str(user_id))
        return PublicProfile(
            email=user.email,
            first_name=user.first_name,
            second_name=user.second_name,
            avatar=user.avatar_url,
            phone=user.phone,
        )

    async def update_avatar(
        self,
        db: AsyncSession,
        user: User,
        upload: Optional[UploadFile],
    ) -> AvatarResponse:
        """
        Replace the user's avatar with a freshly uploaded image.

        The image is validated before anything is sent to the host; the
        stored URL only changes once the host has accepted the upload.
        """
        if upload is None or not upload.filename:
            raise ValidationError(message="Image required", field="file")

        try:
            image = await image_service.read_image(upload)
        except UnsupportedMediaTypeError as e:
            # Avatar uploads report a rejected file type as a plain 400
            raise ValidationError(message=e.message, field="file", context=dict(e.context))
        avatar_url = await image_service.upload_image(image)

        user.avatar_url = avatar_url
        await db.flush()
        logger.info("User %s changed avatar", user.id)
        return AvatarResponse(avatar_url=avatar_url)

    async def reset_avatar(self, db: AsyncSession, user: User) -> AvatarResponse:
        user.avatar_url = settings.default_avatar_url
        await db.flush()
        logger.info("User %s reset avatar to default", user.id)
        return AvatarResponse(avatar_url=user.avatar_url)

    def list_creators(self) -> List[Creator]:
        return list(CREATORS)


user_service = UserService()
