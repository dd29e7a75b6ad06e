"""
CuriousDog Backend — Question Repository
==========================================

What:  The question store: insert, lookup, conditional answer, paged queries.
Who:   QuestionService.

Answer atomicity:
    update_answer() issues a single
        UPDATE questions SET answer = :answer, answered_at = :now
        WHERE id = :id AND receiver_id = :receiver_id AND answer IS NULL
    and reports whether a row changed. The database decides which of two
    concurrent answers wins; the loser sees rowcount 0. There is no
    read-then-write window.

Paged queries:
    query_page() always orders by created_at DESC, id DESC (the id breaks
    ties between questions created in the same instant so pages stay
    disjoint) and applies OFFSET/LIMIT. It fetches `limit + 1` rows so the
    caller can tell whether another page exists without a COUNT query.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.question import Question


@dataclass(frozen=True)
class QuestionFilter:
    """Which questions a page query selects. Unset fields do not filter."""

    asker_id: Optional[int] = None
    receiver_id: Optional[int] = None
    answered_only: bool = False


class QuestionRepository:
    """Question store backed by one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select(self):
        return select(Question).options(
            selectinload(Question.asker),
            selectinload(Question.receiver),
        )

    async def insert(
        self,
        body: str,
        is_anonymous: bool,
        receiver_id: int,
        asker_id: int,
    ) -> Question:
        question = Question(
            body=body,
            is_anonymous=is_anonymous,
            receiver_id=receiver_id,
            asker_id=asker_id,
            answer=None,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(question)
        await self.session.flush()
        # Reload with asker/receiver attached for the response
        return await self.find_by_id(question.id)

    async def find_by_id(self, question_id: int) -> Optional[Question]:
        result = await self.session.execute(
            self._select()
            .where(Question.id == question_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_answer(self, question_id: int, receiver_id: int, answer: str) -> bool:
        """
        Set the answer iff the question belongs to `receiver_id` and is unanswered.

        Returns True when this call wrote the answer, False otherwise (missing
        question, other receiver, or already answered; the caller re-reads to
        tell which).
        """
        result = await self.session.execute(
            update(Question)
            .where(
                Question.id == question_id,
                Question.receiver_id == receiver_id,
                Question.answer.is_(None),
            )
            .values(answer=answer, answered_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def query_page(
        self,
        question_filter: QuestionFilter,
        offset: int,
        limit: int,
    ) -> Tuple[List[Question], bool]:
        """
        Returns (questions, has_more) for one page, newest first.
        """
        query = self._select()
        if question_filter.asker_id is not None:
            query = query.where(Question.asker_id == question_filter.asker_id)
        if question_filter.receiver_id is not None:
            query = query.where(Question.receiver_id == question_filter.receiver_id)
        if question_filter.answered_only:
            query = query.where(Question.answer.is_not(None))

        query = (
            query.order_by(desc(Question.created_at), desc(Question.id))
            .offset(offset)
            .limit(limit + 1)
        )

        result = await self.session.execute(query)
        questions = list(result.scalars().all())

        has_more = len(questions) > limit
        return questions[:limit], has_more
