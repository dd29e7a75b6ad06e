"""
CuriousDog Backend — Question Service (Lifecycle & Feeds)
===========================================================

What:  Enforces the question lifecycle and builds paginated, visibility-filtered feeds.
How:   Composes QuestionRepository (question store) and UserRepository
       (user directory) over the request's database session.
Who:   Called by the questions route handlers.

Lifecycle:
    ┌──────────────────────┐   answer_question()   ┌────────────┐
    │ Created (unanswered) │ ────────────────────▶ │  Answered  │ (terminal)
    └──────────────────────┘   receiver only, once └────────────┘

    Any further answer attempt fails with ConflictError.

Visibility:
    Every QuestionResponse is built by _to_response(question, viewer_id).
    The asker identity (asker_id + asker profile) is included only when the
    question is attributed or the viewer is the asker. Feeds that have no
    single viewer (global feed, public profile feed) pass viewer_id=None,
    so anonymous askers are always stripped there.

Pagination:
    Offset-based. Invalid limit/page values (missing, non-numeric, negative,
    zero limit) fall back to defaults instead of failing the request; an
    oversized limit is clamped to settings.max_page_limit.

Design Decision:
    QuestionService is stateless. The acting user is always an explicit
    argument supplied by the route from the request's Actor, never read
    from shared state.
"""

import logging
from typing import Any, Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    ConflictError,
    CuriousDogError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.models.question import Question
from app.repositories.questions import QuestionFilter, QuestionRepository
from app.repositories.users import UserRepository
from app.schemas.question import QuestionListResponse, QuestionResponse
from app.schemas.user import UserProfile

logger = logging.getLogger(__name__)

ASKED_VALUES = {"true": True, "false": False}

# Offsets past this cannot address a real row and overflow 64-bit driver integers
MAX_OFFSET = 2 ** 62


def _coerce_non_negative_int(value: Any) -> Optional[int]:
    """Returns value as an int >= 0, or None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdecimal():
            try:
                return int(stripped)
            except ValueError:
                # Longer than sys.get_int_max_str_digits()
                return None
    return None


def normalize_pagination(limit: Any, page: Any) -> Tuple[int, int]:
    """
    Turn raw limit/page input into a usable (limit, page) pair.

    Missing, non-numeric or negative values become the defaults
    (settings.default_page_limit, 0). A zero limit is also defaulted; limits
    above settings.max_page_limit are clamped. Only ASCII-style decimal
    strings count as numbers ("²" is junk, not 2).
    """
    parsed_limit = _coerce_non_negative_int(limit)
    parsed_page = _coerce_non_negative_int(page)

    if not parsed_limit:
        parsed_limit = settings.default_page_limit
    parsed_limit = min(parsed_limit, settings.max_page_limit)

    if parsed_page is None:
        parsed_page = 0

    return parsed_limit, parsed_page


def parse_asked(asked: Union[bool, str, None]) -> bool:
    """
    Interpret the `asked` discriminator of the current-user feed.

    Accepts True/False or "true"/"false" (any case). Anything else,
    including a missing value, raises ValidationError.
    """
    if isinstance(asked, bool):
        return asked
    if isinstance(asked, str) and asked.strip().lower() in ASKED_VALUES:
        return ASKED_VALUES[asked.strip().lower()]
    raise ValidationError(
        message="Parameter 'asked' must be 'true' (questions you asked) or 'false' (questions you received)",
        field="asked",
        context={"received": str(asked)},
    )


class QuestionService:
    """
    Business logic for questions.

    Responsibilities:
        - create_question():            ask a user a question
        - answer_question():            receiver answers once
        - get_questions():              global feed of answered questions
        - get_current_user_questions(): the actor's asked/received feed
        - get_user_questions():         a user's public profile feed

    Error Handling Strategy:
        Application errors propagate unchanged. SQLAlchemy errors are logged
        and wrapped in DatabaseError so no SQL reaches the client.
    """

    # ── Visibility ────────────────────────────────────────────────────────

    @staticmethod
    def _to_response(question: Question, viewer_id: Optional[int]) -> QuestionResponse:
        reveal_asker = not question.is_anonymous or (
            viewer_id is not None and viewer_id == question.asker_id
        )
        return QuestionResponse(
            id=question.id,
            body=question.body,
            is_anonymous=question.is_anonymous,
            answer=question.answer,
            created_at=question.created_at,
            answered_at=question.answered_at,
            receiver_id=question.receiver_id,
            receiver=UserProfile.model_validate(question.receiver),
            asker_id=question.asker_id if reveal_asker else None,
            asker=UserProfile.model_validate(question.asker) if reveal_asker else None,
        )

    # ── Commands ──────────────────────────────────────────────────────────

    async def create_question(
        self,
        db: AsyncSession,
        body: str,
        is_anonymous: bool,
        receiver_id: int,
        asker_id: int,
    ) -> QuestionResponse:
        """
        Ask `receiver_id` a question on behalf of `asker_id`.

        The returned question includes the asker identity even when anonymous:
        the caller is the asker.

        Raises:
            ValidationError: empty/oversized body or non-boolean anonymity flag
            NotFoundError:   receiver (or asker) does not exist
            DatabaseError:   persistence failed
        """
        if not isinstance(body, str) or not body.strip():
            raise ValidationError(message="Question body must not be empty", field="body")
        body = body.strip()
        if len(body) > settings.question_max_length:
            raise ValidationError(
                message=f"Question body must be at most {settings.question_max_length} characters",
                field="body",
                context={"length": len(body), "max_length": settings.question_max_length},
            )
        if not isinstance(is_anonymous, bool):
            raise ValidationError(message="isAnonymous must be a boolean", field="is_anonymous")

        try:
            users = UserRepository(db)
            if not await users.exists(receiver_id):
                raise NotFoundError(resource="user", resource_id=str(receiver_id))
            if not await users.exists(asker_id):
                raise NotFoundError(resource="user", resource_id=str(asker_id))

            question = await QuestionRepository(db).insert(
                body=body,
                is_anonymous=is_anonymous,
                receiver_id=receiver_id,
                asker_id=asker_id,
            )
            logger.info(
                "Question %s created: asker=%s receiver=%s anonymous=%s",
                question.id, asker_id, receiver_id, is_anonymous,
            )
            return self._to_response(question, viewer_id=asker_id)

        except CuriousDogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating question: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your question. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def answer_question(
        self,
        db: AsyncSession,
        answer: str,
        question_id: int,
        receiver_id: int,
    ) -> QuestionResponse:
        """
        Record the receiver's answer. Succeeds at most once per question.

        The write is a conditional update; when it changes nothing the
        question is re-read only to choose the right error.

        Raises:
            ValidationError: empty or oversized answer
            NotFoundError:   no such question
            ForbiddenError:  actor is not the question's receiver
            ConflictError:   question already answered
            DatabaseError:   persistence failed
        """
        if not isinstance(answer, str) or not answer.strip():
            raise ValidationError(message="Answer must not be empty", field="answer")
        answer = answer.strip()
        if len(answer) > settings.answer_max_length:
            raise ValidationError(
                message=f"Answer must be at most {settings.answer_max_length} characters",
                field="answer",
                context={"length": len(answer), "max_length": settings.answer_max_length},
            )

        try:
            questions = QuestionRepository(db)
            written = await questions.update_answer(question_id, receiver_id, answer)
            question = await questions.find_by_id(question_id)

            if written and question is not None:
                logger.info("Question %s answered by receiver %s", question_id, receiver_id)
                return self._to_response(question, viewer_id=receiver_id)

            if question is None:
                raise NotFoundError(resource="question", resource_id=str(question_id))
            if question.receiver_id != receiver_id:
                logger.warning(
                    "User %s tried to answer question %s addressed to user %s",
                    receiver_id, question_id, question.receiver_id,
                )
                raise ForbiddenError(
                    message="Only the receiver of a question can answer it",
                    context={"question_id": question_id},
                )
            raise ConflictError(
                message=f"Question {question_id} has already been answered",
                context={"question_id": question_id},
            )

        except CuriousDogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error answering question %s: %s", question_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your answer. Please try again.",
                context={"question_id": question_id},
            )

    # ── Queries ───────────────────────────────────────────────────────────

    async def _page(
        self,
        db: AsyncSession,
        question_filter: QuestionFilter,
        limit: Any,
        page: Any,
        viewer_id: Optional[int],
    ) -> QuestionListResponse:
        limit, page = normalize_pagination(limit, page)
        offset = limit * page
        if offset > MAX_OFFSET:
            logger.debug("Page %d with limit %d is past any result set", page, limit)
            return QuestionListResponse(questions=[], page=page, limit=limit, has_more=False)

        try:
            questions, has_more = await QuestionRepository(db).query_page(
                question_filter, offset=offset, limit=limit
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing questions: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve questions. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return QuestionListResponse(
            questions=[self._to_response(q, viewer_id) for q in questions],
            page=page,
            limit=limit,
            has_more=has_more,
        )

    async def get_questions(self, db: AsyncSession, limit: Any = None, page: Any = None) -> QuestionListResponse:
        """
        Global feed: answered questions from all users, newest first.

        Anonymous askers are stripped for every reader.
        """
        return await self._page(
            db,
            QuestionFilter(answered_only=True),
            limit,
            page,
            viewer_id=None,
        )

    async def get_current_user_questions(
        self,
        db: AsyncSession,
        receiver_id: int,
        asked: Union[bool, str, None],
        limit: Any = None,
        page: Any = None,
    ) -> QuestionListResponse:
        """
        The actor's own feed.

        Args:
            receiver_id: the current user's id (the actor)
            asked:       true → questions the actor asked (full data);
                         false → questions the actor received, answered or
                         not, with anonymous askers stripped

        Raises:
            ValidationError: `asked` is not a recognized value
        """
        if parse_asked(asked):
            question_filter = QuestionFilter(asker_id=receiver_id)
        else:
            question_filter = QuestionFilter(receiver_id=receiver_id)
        return await self._page(db, question_filter, limit, page, viewer_id=receiver_id)

    async def get_user_questions(
        self,
        db: AsyncSession,
        user_id: int,
        limit: Any = None,
        page: Any = None,
    ) -> QuestionListResponse:
        """
        Public profile feed: answered questions received by `user_id`.

        Raises:
            NotFoundError: the user does not exist
        """
        try:
            user_exists = await UserRepository(db).exists(user_id)
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})
        if not user_exists:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        return await self._page(
            db,
            QuestionFilter(receiver_id=user_id, answered_only=True),
            limit,
            page,
            viewer_id=None,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
question_service = QuestionService()
