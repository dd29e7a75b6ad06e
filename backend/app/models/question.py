"""
CuriousDog Backend — Question SQLAlchemy Model
================================================

What:  ORM model representing the `questions` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Written and queried by QuestionRepository.

Table Design:
    - asker_id is stored even for anonymous questions. Anonymity only
      controls what readers see (see QuestionService), never what is stored.
    - answer is NULL until the receiver answers; it is written exactly once
      by a conditional UPDATE guarded on `answer IS NULL`.
    - is_anonymous is fixed at creation; nothing updates it.

Indexes:
    - created_at DESC: the global feed (answered questions, newest first)
    - (receiver_id, created_at): "questions I received" and profile feeds
    - (asker_id, created_at): "questions I asked"
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User


class Question(Base):
    """
    A question from an asker to a receiver.

    Lifecycle:
        1. Created by the asker (answer = NULL, "unanswered")
        2. Answered once by the receiver (answer and answered_at set, terminal)
        Questions are never deleted or edited afterwards.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Question text, 1-600 characters",
    )

    is_anonymous: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        comment="Hide the asker from everyone but the asker",
    )

    asker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    receiver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    answer: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Receiver's answer; NULL until answered, immutable afterwards",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the question was asked (UTC)",
    )

    answered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When the answer was written (UTC)",
    )

    asker: Mapped[User] = relationship(User, foreign_keys=[asker_id], lazy="raise")
    receiver: Mapped[User] = relationship(User, foreign_keys=[receiver_id], lazy="raise")

    __table_args__ = (
        Index("idx_questions_created_at", created_at.desc()),
        Index("idx_questions_receiver_created", receiver_id, created_at),
        Index("idx_questions_asker_created", asker_id, created_at),
    )

    @property
    def is_answered(self) -> bool:
        return self.answer is not None

    def __repr__(self) -> str:
        return (
            f"<Question(id={self.id}, receiver_id={self.receiver_id}, "
            f"answered={self.is_answered})>"
        )
