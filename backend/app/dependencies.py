"""
CallBoard Backend — Route Dependencies
========================================

What:  FastAPI dependency that turns the Authorization header into an
       AuthContext (user + session) for protected routes.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import MissingTokenError
from app.services.auth_service import AuthContext, auth_service

# auto_error=False: a missing header is our 400, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return await auth_service.authenticate(db, credentials.credentials)
