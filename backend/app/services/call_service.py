"""
CallBoard Backend — Call Service (Business Logic Layer)
=========================================================

What:  Everything that happens to listings: posting, deleting, favourites,
       the paged home screen, search and category browsing.
Why:   Keeps the routes thin; every rule about who may do what to a call lives
       here and is unit-testable without HTTP.
How:   ORM queries for the `calls` table plus snapshot-list updates on the
       owning User row. All writes go through the caller's AsyncSession and are
       committed by get_db_session when the request succeeds.

Posting pipeline:
    form fields ──▶ CallCreate (400 on bad field)
        │
    image parts ──▶ content type (415) ─▶ count (400) ─▶ bytes (400/415)
        │
    free-category price rule (400)
        │
    image host upload (503 on failure) ─▶ INSERT call ─▶ user.calls += snapshot
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.config import settings
from app.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
    validation_error_from_errors,
)
from app.models.call import LEGACY_CATEGORY_SPELLINGS, Call, Category
from app.models.user import User, find_snapshot, with_snapshot, without_snapshot
from app.schemas.call import (
    Ad,
    CallCreate,
    CallExistsResponse,
    CallResponse,
    CategoryPage,
    FavouritesResponse,
    NewFavouritesResponse,
    OwnCallsResponse,
)
from app.services.catalog import ADS, CATEGORIES, RUSSIAN_CATEGORIES
from app.services.image_service import image_service

logger = logging.getLogger(__name__)

# Home screen pages: each shows two categories side by side
PAGE_CATEGORIES: Dict[int, List[Category]] = {
    1: [Category.ELECTRONICS, Category.PROPERTY],
    2: [Category.WORK, Category.TRANSPORT],
    3: [Category.BUSINESS_AND_SERVICES, Category.RECREATION_AND_SPORT],
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_response(call: Call) -> CallResponse:
    return CallResponse.model_validate(call.snapshot())


class CallService:
    """
    Listing operations.

    Methods that act on behalf of a user take the User row resolved by the
    auth dependency; it is attached to the same session passed as `db`.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Writes
    # ══════════════════════════════════════════════════════════════════════

    async def post_call(
        self,
        db: AsyncSession,
        user: User,
        form: Mapping[str, Any],
        files: Sequence[UploadFile],
    ) -> CallResponse:
        """
        Validate a multipart listing, upload its images and store it.

        Args:
            form: Raw form fields (title, description, category, price);
                  absent fields are simply missing from the mapping.
            files: The `file` parts in the order they were sent.

        Raises:
            ValidationError: bad field, no images, too many images, priced free call
            UnsupportedMediaTypeError: a part is not an image
            ImageHostError: the image host could not store an image
        """
        try:
            data = CallCreate.model_validate(dict(form))
        except PydanticValidationError as e:
            raise validation_error_from_errors(e.errors())

        uploads = [f for f in files if f.filename]
        for upload in uploads:
            image_service.validate_content_type(upload.content_type)
        if len(uploads) > settings.max_images_per_call:
            raise ValidationError(
                message=f"Only {settings.max_images_per_call} or fewer images are allowed",
                field="file",
                context={"count": len(uploads)},
            )
        if not uploads:
            raise ValidationError(message="No images provided", field="file")

        images = await image_service.read_images(uploads)

        if data.category is Category.FREE and data.price != 0:
            raise ValidationError(
                message=f"Can't set price for {Category.FREE.value} category. Must be 0",
                field="price",
            )

        image_urls = await image_service.upload_images(images)

        call = Call(
            id=uuid.uuid4(),
            title=data.title,
            description=data.description,
            category=data.category.value,
            price=data.price,
            image_urls=image_urls,
            user_id=user.id,
        )
        db.add(call)
        await db.flush()

        user.calls = with_snapshot(user.calls or [], call.snapshot())
        await db.flush()

        logger.info(
            "User %s posted call %s (%s, %d images)",
            user.id,
            call.id,
            call.category,
            len(image_urls),
        )
        return _to_response(call)

    async def add_to_favourites(
        self, db: AsyncSession, user: User, call_id: uuid.UUID
    ) -> NewFavouritesResponse:
        call = await db.get(Call, call_id)
        if call is None:
            raise NotFoundError(message="Call not found", resource="call", resource_id=str(call_id))

        favourites = list(user.favourites or [])
        if find_snapshot(favourites, str(call_id)) is not None:
            raise ForbiddenError(message="Already in favourites")

        user.favourites = with_snapshot(favourites, call.snapshot())
        await db.flush()
        logger.info("User %s favourited call %s", user.id, call_id)
        return NewFavouritesResponse(new_favourites=user.favourites)

    async def remove_from_favourites(
        self, db: AsyncSession, user: User, call_id: uuid.UUID
    ) -> NewFavouritesResponse:
        call = await db.get(Call, call_id)
        if call is None:
            raise NotFoundError(message="Call not found", resource="call", resource_id=str(call_id))

        favourites = list(user.favourites or [])
        if find_snapshot(favourites, str(call_id)) is None:
            raise ForbiddenError(message="Not in favourites")

        user.favourites = without_snapshot(favourites, str(call_id))
        await db.flush()
        logger.info("User %s unfavourited call %s", user.id, call_id)
        return NewFavouritesResponse(new_favourites=user.favourites)

    async def delete_call(self, db: AsyncSession, user: User, call_id: uuid.UUID) -> None:
        """
        Delete one of the user's own calls.

        Only the owner's arrays are cleaned; other users keep their favourite
        snapshots of the deleted call.

        Raises:
            NotFoundError: the call does not exist or is not the user's (→ 404)
        """
        call = await db.get(Call, call_id)
        calls = list(user.calls or [])
        if call is None or find_snapshot(calls, str(call_id)) is None:
            raise NotFoundError(message="Call not found", resource="call", resource_id=str(call_id))

        await db.delete(call)
        user.calls = without_snapshot(calls, str(call_id))
        favourites = list(user.favourites or [])
        if find_snapshot(favourites, str(call_id)) is not None:
            user.favourites = without_snapshot(favourites, str(call_id))
        await db.flush()
        logger.info("User %s deleted call %s", user.id, call_id)

    # ══════════════════════════════════════════════════════════════════════
    # Reads
    # ══════════════════════════════════════════════════════════════════════

    async def _find_by_categories(self, db: AsyncSession, categories: Sequence[str]) -> List[Call]:
        result = await db.execute(
            select(Call).where(Call.category.in_(categories)).order_by(Call.created_at, Call.id)
        )
        return list(result.scalars().all())

    async def load_page(self, db: AsyncSession, page: int) -> CategoryPage:
        """Return `{category: [calls]}` for the two categories shown on `page`."""
        categories = PAGE_CATEGORIES.get(page)
        if categories is None:
            raise ValidationError(
                message='"page" must be less than or equal to 3',
                field="page",
                context={"page": page},
            )

        body: CategoryPage = {}
        for category in categories:
            calls = await self._find_by_categories(db, [category.value])
            body[category.value] = [_to_response(call) for call in calls]
        return body

    def get_favourites(self, user: User) -> FavouritesResponse:
        return FavouritesResponse(favourites=list(user.favourites or []))

    def get_own_calls(self, user: User) -> OwnCallsResponse:
        return OwnCallsResponse(calls=list(user.calls or []))

    async def search_calls(self, db: AsyncSession, search: str) -> List[CallResponse]:
        """Case-insensitive substring match on the title; the term is taken literally."""
        pattern = f"%{_escape_like(search)}%"
        result = await db.execute(
            select(Call)
            .where(Call.title.ilike(pattern, escape="\\"))
            .order_by(Call.created_at, Call.id)
        )
        return [_to_response(call) for call in result.scalars().all()]

    def list_categories(self) -> List[str]:
        return list(CATEGORIES)

    def list_russian_categories(self) -> List[str]:
        return list(RUSSIAN_CATEGORIES)

    async def get_category(self, db: AsyncSession, category: str) -> List[CallResponse]:
        """
        All calls in one category, including rows stored under the older
        spaced spelling of that category.

        Raises:
            NotFoundError: nothing matched (→ 404 "No calls found")
        """
        spellings = [category, *LEGACY_CATEGORY_SPELLINGS.get(category, [])]
        calls = await self._find_by_categories(db, spellings)
        if not calls:
            raise NotFoundError(message="No calls found", resource="category", resource_id=category)
        return [_to_response(call) for call in calls]

    def list_ads(self) -> List[Ad]:
        return list(ADS)

    async def call_exists(self, db: AsyncSession, call_id: uuid.UUID) -> CallExistsResponse:
        call = await db.get(Call, call_id)
        return CallExistsResponse(success=call is not None)


call_service = CallService()
