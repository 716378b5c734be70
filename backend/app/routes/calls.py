"""
CallBoard Backend — Call Route Handlers
=========================================

What:  Every /call endpoint: posting and deleting listings, favourites,
       the paged home screen, search, category browsing and static lists.
Why:   Thin HTTP layer over CallService.
How:   Query/path validation is declarative (FastAPI turns failures into 400s
       through the RequestValidationError handler); everything else is
       delegated.

Route order matters: static paths (/own, /favourites, /find, /categories, ...)
are declared before DELETE /call/{callId}.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_auth_context
from app.schemas.call import (
    Ad,
    CallExistsResponse,
    CallResponse,
    CategoryPage,
    FavouritesResponse,
    NewFavouritesResponse,
    OwnCallsResponse,
)
from app.schemas.common import ErrorResponse
from app.services.auth_service import AuthContext
from app.services.call_service import call_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/call", tags=["Calls"])

_AUTH_ERRORS = {
    400: {"description": "No token provided or invalid input", "model": ErrorResponse},
    401: {"description": "Invalid token", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Listing CRUD
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "",
    status_code=201,
    response_model=CallResponse,
    responses={
        **_AUTH_ERRORS,
        415: {"description": "A file part is not an image", "model": ErrorResponse},
        503: {"description": "Image host unavailable", "model": ErrorResponse},
    },
    summary="Post a new call",
    description=(
        "Multipart form with title, description, category and price fields plus "
        "one to five `file` image parts. Images are stored on the external image "
        "host and the call keeps their URLs."
    ),
)
async def post_call(
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    file: List[UploadFile] = File(default=[], description="Listing images (max 5)"),
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> CallResponse:
    # Absent fields are left out so validation reports them as required
    form = {
        name: value
        for name, value in (
            ("title", title),
            ("description", description),
            ("category", category),
            ("price", price),
        )
        if value is not None
    }
    return await call_service.post_call(db, context.user, form, file)


@router.get(
    "",
    response_model=CategoryPage,
    responses={400: {"description": "Page outside 1..3", "model": ErrorResponse}},
    summary="Home screen page",
    description=(
        "page=1: electronics and property; page=2: work and transport; "
        "page=3: businessAndServices and recreationAndSport."
    ),
)
async def load_page(
    page: int = Query(..., ge=1, le=3),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryPage:
    return await call_service.load_page(db, page)


@router.get(
    "/own",
    response_model=OwnCallsResponse,
    responses=_AUTH_ERRORS,
    summary="Calls posted by the current user",
)
async def get_own_calls(context: AuthContext = Depends(get_auth_context)) -> OwnCallsResponse:
    return call_service.get_own_calls(context.user)


@router.get(
    "/favourites",
    response_model=FavouritesResponse,
    responses=_AUTH_ERRORS,
    summary="The current user's favourites",
)
async def get_favourites(context: AuthContext = Depends(get_auth_context)) -> FavouritesResponse:
    return call_service.get_favourites(context.user)


# ══════════════════════════════════════════════════════════════════════════
# Browsing
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/find",
    response_model=List[CallResponse],
    responses={400: {"description": "Missing search term", "model": ErrorResponse}},
    summary="Search calls by title",
)
async def search_calls(
    search: str = Query(..., min_length=1, description="Case-insensitive title fragment"),
    db: AsyncSession = Depends(get_db_session),
) -> List[CallResponse]:
    return await call_service.search_calls(db, search)


@router.get("/categories", response_model=List[str], summary="Category values")
async def get_categories() -> List[str]:
    return call_service.list_categories()


@router.get(
    "/russian-categories",
    response_model=List[str],
    summary="Category display names in Russian",
)
async def get_russian_categories() -> List[str]:
    return call_service.list_russian_categories()


@router.get(
    "/specific/{category}",
    response_model=List[CallResponse],
    responses={404: {"description": "No calls found", "model": ErrorResponse}},
    summary="All calls in one category",
)
async def get_category(
    category: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[CallResponse]:
    return await call_service.get_category(db, category)


@router.get("/ads", response_model=List[Ad], summary="Promotional banners")
async def get_ads() -> List[Ad]:
    return call_service.list_ads()


@router.get(
    "/exists/{callId}",
    response_model=CallExistsResponse,
    responses={400: {"description": "Malformed call id", "model": ErrorResponse}},
    summary="Check whether a call exists",
)
async def call_exists(
    call_id: uuid.UUID = Path(alias="callId"),
    db: AsyncSession = Depends(get_db_session),
) -> CallExistsResponse:
    return await call_service.call_exists(db, call_id)


# ══════════════════════════════════════════════════════════════════════════
# Favourites & deletion
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/favourite/{callId}",
    response_model=NewFavouritesResponse,
    responses={
        **_AUTH_ERRORS,
        403: {"description": "Already in favourites", "model": ErrorResponse},
        404: {"description": "Call not found", "model": ErrorResponse},
    },
    summary="Add a call to favourites",
)
async def add_to_favourites(
    call_id: uuid.UUID = Path(alias="callId"),
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> NewFavouritesResponse:
    return await call_service.add_to_favourites(db, context.user, call_id)


@router.delete(
    "/favourite/{callId}",
    response_model=NewFavouritesResponse,
    responses={
        **_AUTH_ERRORS,
        403: {"description": "Not in favourites", "model": ErrorResponse},
        404: {"description": "Call not found", "model": ErrorResponse},
    },
    summary="Remove a call from favourites",
)
async def remove_from_favourites(
    call_id: uuid.UUID = Path(alias="callId"),
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> NewFavouritesResponse:
    return await call_service.remove_from_favourites(db, context.user, call_id)


@router.delete(
    "/{callId}",
    status_code=204,
    response_class=Response,
    responses={
        **_AUTH_ERRORS,
        404: {"description": "Call not found or not owned", "model": ErrorResponse},
    },
    summary="Delete one of your calls",
)
async def delete_call(
    call_id: uuid.UUID = Path(alias="callId"),
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await call_service.delete_call(db, context.user, call_id)
    return Response(status_code=204)
