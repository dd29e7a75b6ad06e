"""
CuriousDog Backend — Question Route Handlers
==============================================

What:  HTTP adapter for the question lifecycle and feeds.
How:   Extracts path/query/body fields and the authenticated Actor, calls
       QuestionService, returns its response models.
Who:   Called by the frontend feed, profile, and "me" pages.

Routes:
    POST  /api/users/{user_id}/questions        ask user_id a question      (auth)
    GET   /api/users/{user_id}/questions        user_id's answered questions
    GET   /api/questions                        global feed
    GET   /api/questions/me?asked=true|false    the actor's asked/received feed (auth)
    PATCH /api/questions/{question_id}/answer   answer a received question  (auth)

Pagination parameters arrive as raw strings so that junk values are
defaulted by the service instead of being rejected with 422.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Actor, get_current_actor
from app.schemas.common import ErrorResponse
from app.schemas.question import (
    AnswerRequest,
    QuestionCreateRequest,
    QuestionListResponse,
    QuestionResponse,
)
from app.services.question_service import question_service

router = APIRouter(prefix="/api", tags=["Questions"])

LIMIT_DESCRIPTION = "Questions per page (default 10, capped at the configured maximum)"
PAGE_DESCRIPTION = "Zero-based page number"


def _page_param(page: Optional[str], page_params: Optional[str]) -> Optional[str]:
    """`pageParams` is the name the web client sends for `page`."""
    return page if page is not None else page_params


@router.post(
    "/users/{user_id}/questions",
    status_code=201,
    response_model=QuestionResponse,
    responses={
        400: {"description": "Invalid question body", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Receiver not found", "model": ErrorResponse},
    },
    summary="Ask a user a question",
)
async def create_question(
    user_id: int,
    payload: QuestionCreateRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    return await question_service.create_question(
        db=db,
        body=payload.body,
        is_anonymous=payload.is_anonymous,
        receiver_id=user_id,
        asker_id=actor.user_id,
    )


@router.get(
    "/users/{user_id}/questions",
    response_model=QuestionListResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="List a user's answered questions",
)
async def list_user_questions(
    user_id: int,
    limit: Optional[str] = Query(default=None, description=LIMIT_DESCRIPTION),
    page: Optional[str] = Query(default=None, description=PAGE_DESCRIPTION),
    page_params: Optional[str] = Query(default=None, alias="pageParams", include_in_schema=False),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    return await question_service.get_user_questions(
        db=db,
        user_id=user_id,
        limit=limit,
        page=_page_param(page, page_params),
    )


@router.get(
    "/questions",
    response_model=QuestionListResponse,
    summary="Global feed of answered questions",
    description=(
        "Answered questions from all users, newest first. "
        "Anonymous questions never include the asker."
    ),
)
async def list_questions(
    limit: Optional[str] = Query(default=None, description=LIMIT_DESCRIPTION),
    page: Optional[str] = Query(default=None, description=PAGE_DESCRIPTION),
    page_params: Optional[str] = Query(default=None, alias="pageParams", include_in_schema=False),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    return await question_service.get_questions(
        db=db,
        limit=limit,
        page=_page_param(page, page_params),
    )


@router.get(
    "/questions/me",
    response_model=QuestionListResponse,
    responses={
        400: {"description": "Invalid 'asked' value", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
    summary="Questions you asked or received",
)
async def list_my_questions(
    asked: str = Query(
        default="false",
        description="'true' for questions you asked, 'false' for questions you received",
    ),
    limit: Optional[str] = Query(default=None, description=LIMIT_DESCRIPTION),
    page: Optional[str] = Query(default=None, description=PAGE_DESCRIPTION),
    page_params: Optional[str] = Query(default=None, alias="PageParams", include_in_schema=False),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    return await question_service.get_current_user_questions(
        db=db,
        receiver_id=actor.user_id,
        asked=asked,
        limit=limit,
        page=_page_param(page, page_params),
    )


@router.patch(
    "/questions/{question_id}/answer",
    response_model=QuestionResponse,
    responses={
        400: {"description": "Empty answer", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        403: {"description": "Not the receiver", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
        409: {"description": "Already answered", "model": ErrorResponse},
    },
    summary="Answer a question you received",
)
async def answer_question(
    question_id: int,
    payload: AnswerRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    return await question_service.answer_question(
        db=db,
        answer=payload.answer,
        question_id=question_id,
        receiver_id=actor.user_id,
    )
