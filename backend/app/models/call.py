"""
CallBoard Backend — Call (listing) SQLAlchemy Model
=====================================================

What:  ORM model representing the `calls` table: one classified ad per row.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by CallService for CRUD and by UserService for profile payloads.

Table Design Rationale:
    - category is a plain string column rather than a database enum: rows written
      by older clients use spaced spellings ("business and services") that the
      category browser still has to return.
    - image_urls is a JSON array of URLs returned by the external image host;
      the images themselves are never stored here.
    - user_id references the owner; ownership checks in the API go through the
      owner's embedded `calls` snapshots, not through this column.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, CheckConstraint, DateTime, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Category(str, enum.Enum):
    """Closed set of listing categories accepted when posting a call."""

    PROPERTY = "property"
    TRANSPORT = "transport"
    WORK = "work"
    ELECTRONICS = "electronics"
    BUSINESS_AND_SERVICES = "businessAndServices"
    RECREATION_AND_SPORT = "recreationAndSport"
    FREE = "free"
    TRADE = "trade"


# Spellings found in older rows, keyed by the current category value
LEGACY_CATEGORY_SPELLINGS: Dict[str, List[str]] = {
    Category.BUSINESS_AND_SERVICES.value: ["business and services"],
    Category.RECREATION_AND_SPORT.value: ["recreation and sport"],
}

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Call(Base):
    """A classified-ad listing posted by a user."""

    __tablename__ = "calls"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)

    # Invariant: 0 when category == "free" (enforced in CallService)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    image_urls: Mapped[List[str]] = mapped_column(JSONDocument, nullable=False, default=list)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_calls_category", "category"),
        Index("idx_calls_user_id", "user_id"),
        CheckConstraint("price >= 0", name="ck_calls_price_non_negative"),
    )

    def snapshot(self) -> Dict[str, Any]:
        """
        Denormalized copy of this call, as embedded in a user's `calls` or
        `favourites` array. Keys are the API's camelCase names so snapshots
        can be returned without further mapping.
        """
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "price": self.price,
            "imageUrls": list(self.image_urls or []),
            "userId": str(self.user_id),
        }

    def __repr__(self) -> str:
        return f"<Call(id={self.id}, category='{self.category}', title='{self.title}')>"
