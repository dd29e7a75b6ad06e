"""
CuriousDog Backend — Auth Route Handlers
==========================================

What:  POST /api/auth/register and POST /api/auth/login.
Who:   The registration and login forms.

Both return an AuthResponse; the client stores the token and sends it as
`Authorization: Bearer <token>` on authenticated requests.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from app.services.user_service import user_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={409: {"description": "Username or email taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await user_service.register(
        db=db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await user_service.login(db=db, email=payload.email, password=payload.password)
