"""
CallBoard Backend — Auth Service
==================================

What:  Registration, login, logout and bearer-token authentication.
How:   bcrypt password check (in a worker thread) → Session row → signed
       token carrying (uid, sid).
       Authentication reverses it: verify signature → load user and session →
       hand both to the route. A deleted session invalidates its token.

Authentication path (single, linear):
    decode token ──fail──▶ 401 "Unauthorized"
        │
    load user    ──none──▶ 404 "Invalid user"
        │
    load session ──none──▶ 404 "Invalid session"
        │
    AuthContext(user, session)
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.session import Session
from app.models.user import User
from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from app.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.services.user_service import build_profile

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """The authenticated user and the session their token belongs to."""
    user: User
    session: Session


class AuthService:
    """Stateless; every method receives the request's database session."""

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> RegisterResponse:
        """
        Create a user account.

        Raises:
            ConflictError: the email is already registered (→ 409)
        """
        email = str(payload.email)
        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message=f"User with {email} email already exists")

        # bcrypt is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, payload.password)
        user = User(
            email=email,
            password_hash=password_hash,
            phone=payload.phone,
            first_name=payload.first_name,
            second_name=payload.second_name,
            avatar_url=settings.default_avatar_url,
            calls=[],
            favourites=[],
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError(message=f"User with {email} email already exists")

        logger.info("Registered user %s", user.id)
        return RegisterResponse(
            email=user.email,
            phone=user.phone,
            first_name=user.first_name,
            second_name=user.second_name,
            id=user.id,
        )

    async def login(self, db: AsyncSession, payload: LoginRequest) -> LoginResponse:
        """
        Check credentials and open a new session.

        Raises:
            ForbiddenError: unknown email or wrong password (→ 403)
        """
        email = str(payload.email)
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise ForbiddenError(message=f"User with {email} email doesn't exist")
        if not await asyncio.to_thread(verify_password, payload.password, user.password_hash):
            raise ForbiddenError(message="Password is wrong")

        session = Session(user_id=user.id)
        db.add(session)
        await db.flush()

        logger.info("User %s logged in (session %s)", user.id, session.id)
        return LoginResponse(
            token=create_access_token(user.id, session.id),
            user=build_profile(user),
        )

    async def logout(self, db: AsyncSession, context: AuthContext) -> None:
        await db.execute(delete(Session).where(Session.id == context.session.id))
        logger.info("User %s logged out (session %s)", context.user.id, context.session.id)

    async def authenticate(self, db: AsyncSession, token: str) -> AuthContext:
        """Resolve a bearer token to its user and live session."""
        payload = decode_access_token(token)

        user = await db.get(User, payload.uid)
        session = await db.get(Session, payload.sid)
        if user is None:
            raise NotFoundError(message="Invalid user", resource="user", resource_id=str(payload.uid))
        if session is None or session.user_id != user.id:
            raise NotFoundError(
                message="Invalid session",
                resource="session",
                resource_id=str(payload.sid),
            )
        return AuthContext(user=user, session=session)


auth_service = AuthService()
