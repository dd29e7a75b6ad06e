"""
CuriousDog Backend — User Repository
======================================

What:  Read/write access to the `users` table.
Who:   UserService (accounts, profiles) and QuestionService (existence checks).
"""

from typing import Any, Optional

from sqlalchemy import exists as sql_exists
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserRepository:
    """User directory backed by one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, user_id: int) -> bool:
        result = await self.session.execute(
            select(sql_exists().where(User.id == user_id))
        )
        return bool(result.scalar())

    async def get_profile(self, user_id: int) -> Optional[User]:
        """Returns the user row (callers project it to a public profile) or None."""
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[User]:
        # Usernames are unique case-insensitively
        result = await self.session.execute(
            select(User).where(func.lower(User.username) == username.lower())
        )
        return result.scalar_one_or_none()

    async def insert(self, username: str, email: str, password_hash: str) -> User:
        user = User(
            username=username,
            email=email.lower(),
            password_hash=password_hash,
        )
        self.session.add(user)
        await self.session.flush()  # Assigns the id without committing
        return user

    async def update(self, user: User, **changes: Any) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        await self.session.flush()
        return user
