"""
CallBoard Backend — Auth Route Handlers
=========================================

What:  POST /auth/register, POST /auth/login, POST /auth/logout.
How:   Validate the JSON body via pydantic, delegate to AuthService.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_auth_context
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from app.services.auth_service import AuthContext, auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Invalid request body", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    return await auth_service.register(db, payload)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Invalid request body", "model": ErrorResponse},
        403: {"description": "Unknown email or wrong password", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
    description=(
        "Checks the credentials, opens a new session and returns a token bound "
        "to it together with the user's profile."
    ),
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, payload)


@router.post(
    "/logout",
    status_code=204,
    response_class=Response,
    responses={
        400: {"description": "No token provided", "model": ErrorResponse},
        401: {"description": "Invalid token", "model": ErrorResponse},
        404: {"description": "Invalid user or session", "model": ErrorResponse},
    },
    summary="End the current session",
)
async def logout(
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await auth_service.logout(db, context)
    return Response(status_code=204)
