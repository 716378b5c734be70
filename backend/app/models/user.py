"""
CallBoard Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Why:   Holds identity, profile fields and two embedded collections of call
       snapshots (`calls`, `favourites`).

Denormalization:
    `calls` and `favourites` store copies of calls as they looked when they were
    posted or favourited. Later edits to a call do not reach these copies, and
    deleting a call only cleans the owner's own arrays. Membership checks are
    linear scans over these lists by id.

Mutation rule:
    The JSON columns are not mutation-tracked. Code that changes them must
    assign a new list (see `with_snapshot` / `without_snapshot`) so SQLAlchemy
    notices the change.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.config import settings
from app.database import Base
from app.models.call import JSONDocument

Snapshot = Dict[str, Any]


def find_snapshot(snapshots: List[Snapshot], call_id: str) -> Optional[Snapshot]:
    """Linear scan of an embedded array by id equality."""
    for snapshot in snapshots:
        if str(snapshot.get("id")) == call_id:
            return snapshot
    return None


def with_snapshot(snapshots: List[Snapshot], snapshot: Snapshot) -> List[Snapshot]:
    return [*snapshots, snapshot]


def without_snapshot(snapshots: List[Snapshot], call_id: str) -> List[Snapshot]:
    return [s for s in snapshots if str(s.get("id")) != call_id]


class User(Base):
    """A registered marketplace user."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Uniqueness is checked by AuthService before insert; the unique index is
    # the backstop for concurrent registrations.
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    second_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    avatar_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default=lambda: settings.default_avatar_url,
    )

    calls: Mapped[List[Snapshot]] = mapped_column(JSONDocument, nullable=False, default=list)
    favourites: Mapped[List[Snapshot]] = mapped_column(JSONDocument, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
