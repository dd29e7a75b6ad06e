"""
CuriousDog Backend — Question Request/Response Schemas
========================================================

What:  API contract for asking, answering, and listing questions.
Who:   questions routes; QuestionService builds every QuestionResponse.

Anonymity at the read boundary:
    QuestionResponse.asker_id and QuestionResponse.asker are Optional.
    QuestionService fills them only when the viewer may know the asker
    (the question is attributed, or the viewer IS the asker). A response
    for an anonymous question shown to anyone else carries null in both.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.schemas.common import ensure_utc
from app.schemas.user import UserProfile


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class QuestionCreateRequest(BaseModel):
    """
    What:  Body of POST /api/users/{user_id}/questions.

    Both snake_case and the frontend's camelCase `isAnonymous` are accepted.
    """
    body: str = Field(min_length=1, max_length=600, description="Question text (1-600 chars)")
    is_anonymous: bool = Field(
        validation_alias=AliasChoices("is_anonymous", "isAnonymous"),
        description="Hide your identity from the receiver and other readers",
    )


class AnswerRequest(BaseModel):
    """Body of PATCH /api/questions/{question_id}/answer."""
    answer: str = Field(min_length=1, max_length=2000)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class QuestionResponse(BaseModel):
    """
    What:  One question as a given viewer is allowed to see it.

    Fields:
        asker_id / asker: null when the question is anonymous and the viewer
                          is not the asker
        answer:           null while unanswered
    """
    id: int
    body: str
    is_anonymous: bool
    answer: Optional[str] = None
    created_at: datetime
    answered_at: Optional[datetime] = None
    receiver_id: int
    receiver: UserProfile
    asker_id: Optional[int] = Field(default=None, description="Null for anonymous questions")
    asker: Optional[UserProfile] = Field(default=None, description="Null for anonymous questions")

    @field_validator("created_at", "answered_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class QuestionListResponse(BaseModel):
    """
    What:  One page of a feed.

    Pagination strategy: offset-based. Page N covers rows
    [N * limit, (N + 1) * limit) of the newest-first ordering.
    `page` and `limit` echo the values actually applied after defaulting.
    """
    questions: List[QuestionResponse]
    page: int = Field(ge=0)
    limit: int = Field(ge=1)
    has_more: bool = Field(description="Whether the next page has at least one question")
