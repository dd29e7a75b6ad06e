"""
CuriousDog Backend — User Route Handlers
==========================================

What:  Account and profile endpoints, profile picture upload, stored file serving.
How:   Thin handlers delegating to UserService; the actor comes from get_current_actor.

Routes:
    GET   /api/users/me            own account                (auth)
    PATCH /api/users/me            change username            (auth)
    POST  /api/users/me/picture    upload profile picture     (auth)
    GET   /api/users/{user_id}     public profile
    GET   /api/files/{path}        serve a stored picture

`/users/me` routes are registered before `/users/{user_id}` so "me" is never
parsed as an id.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Actor, get_current_actor
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.user import UserProfile, UserResponse, UserUpdateRequest
from app.services.file_service import ALLOWED_MIME_TYPES, file_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])

MEDIA_TYPES = {ext: mime for mime, ext in ALLOWED_MIME_TYPES.items()}
MEDIA_TYPES[".jpeg"] = "image/jpeg"


@router.get(
    "/users/me",
    response_model=UserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Get your own account",
)
async def get_me(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_account(db=db, actor_id=actor.user_id)


@router.patch(
    "/users/me",
    response_model=UserResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        409: {"description": "Username taken", "model": ErrorResponse},
    },
    summary="Update your account",
)
async def update_me(
    payload: UserUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_account(
        db=db,
        actor_id=actor.user_id,
        username=payload.username,
    )


@router.post(
    "/users/me/picture",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid file type or size", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
    summary="Upload a profile picture",
    description="PNG or JPEG. Replaces (and deletes) the previous picture.",
)
async def upload_picture(
    file: UploadFile = File(..., description="Profile picture (PNG or JPEG)"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    content = await file.read()
    logger.info(
        "Received picture upload from user %s: filename=%s, size=%d bytes",
        actor.user_id,
        file.filename or "unknown",
        len(content),
    )
    try:
        return await user_service.update_profile_picture(
            db=db,
            actor_id=actor.user_id,
            filename=file.filename or "upload.jpg",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.get(
    "/users/{user_id}",
    response_model=UserProfile,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user's public profile",
)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db=db, user_id=user_id)


@router.get(
    "/files/{file_path:path}",
    summary="Serve stored profile pictures",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    full_path = file_service.resolve_relative_path(file_path)
    if full_path is None:
        raise ValidationError(message="Invalid file path")
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        media_type=MEDIA_TYPES.get(full_path.suffix.lower(), "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
