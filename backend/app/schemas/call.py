"""
CallBoard Backend — Call Request/Response Schemas
===================================================

What:  API contract for listings: the create form, the call body returned
       everywhere a call appears, and the small wrapper payloads.
How:   CallResponse validates both ORM rows (via Call.snapshot()) and the
       snapshot dicts embedded in users, so there is one call shape on the wire.
"""

import uuid
from typing import Dict, List

from pydantic import Field

from app.models.call import Category
from app.schemas.common import CamelModel, StrictCamelModel


class CallCreate(StrictCamelModel):
    """
    Multipart form fields for POST /call (images travel as `file` parts).

    Validation mirrors the create rules:
        - title, description: required non-empty strings
        - category: one of Category
        - price: number >= 0
    The free-category price rule is a business rule checked by CallService
    after image validation, so it is not expressed here.
    """
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: Category
    price: float = Field(ge=0, allow_inf_nan=False)


class CallResponse(CamelModel):
    """A call as returned by the API (rows and embedded snapshots alike)."""
    id: uuid.UUID
    title: str
    description: str
    category: str
    price: float
    image_urls: List[str] = Field(default_factory=list)
    user_id: uuid.UUID


class FavouritesResponse(CamelModel):
    favourites: List[CallResponse]


class NewFavouritesResponse(CamelModel):
    """Returned after adding/removing a favourite: the user's updated list."""
    new_favourites: List[CallResponse]


class OwnCallsResponse(CamelModel):
    calls: List[CallResponse]


class CallExistsResponse(CamelModel):
    success: bool


# One page of the home screen: {categoryValue: [calls]} for two categories
CategoryPage = Dict[str, List[CallResponse]]


class Ad(CamelModel):
    """Promotional banner shown between category sections."""
    title: str
    image_url: str
    link: str
