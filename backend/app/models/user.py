"""
CuriousDog Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table (the user directory).
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Read by UserRepository; referenced by Question via foreign keys.

Table Design:
    - Integer primary key: question routes address users by numeric id
    - username / email: unique; email is stored lower-cased
    - password_hash: bcrypt hash, never serialized by any response schema
    - profile_picture: public URL path of the uploaded picture, NULL until set
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """A registered account that can ask and receive questions."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        unique=True,
        comment="Public handle shown on question cards",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier, stored lower-cased",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the account password",
    )

    profile_picture: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        default=None,
        comment="URL path of the uploaded profile picture",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the account was registered (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
