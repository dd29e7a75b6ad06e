"""Create users and questions tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates `users` and `questions`, the whole CuriousDog schema.
How:   Questions reference users twice (asker and receiver), both cascading
       on delete. Feed queries are served by a created_at DESC index plus
       per-receiver and per-asker composite indexes.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "username",
            sa.String(30),
            nullable=False,
            comment="Public handle shown on question cards",
        ),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Login identifier, stored lower-cased",
        ),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash of the account password",
        ),
        sa.Column(
            "profile_picture",
            sa.String(512),
            nullable=True,
            comment="URL path of the uploaded profile picture",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the account was registered (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("body", sa.Text(), nullable=False, comment="Question text, 1-600 characters"),
        sa.Column(
            "is_anonymous",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
            comment="Hide the asker from everyone but the asker",
        ),
        sa.Column("asker_id", sa.Integer(), nullable=False),
        sa.Column("receiver_id", sa.Integer(), nullable=False),
        sa.Column(
            "answer",
            sa.Text(),
            nullable=True,
            comment="Receiver's answer; NULL until answered, immutable afterwards",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the question was asked (UTC)",
        ),
        sa.Column(
            "answered_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="When the answer was written (UTC)",
        ),
        sa.ForeignKeyConstraint(["asker_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Global feed: ORDER BY created_at DESC
    op.create_index("idx_questions_created_at", "questions", [sa.text("created_at DESC")])
    op.create_index("idx_questions_receiver_created", "questions", ["receiver_id", "created_at"])
    op.create_index("idx_questions_asker_created", "questions", ["asker_id", "created_at"])


def downgrade() -> None:
    """Drop both tables. Questions go first because of the foreign keys."""
    op.drop_index("idx_questions_asker_created", table_name="questions")
    op.drop_index("idx_questions_receiver_created", table_name="questions")
    op.drop_index("idx_questions_created_at", table_name="questions")
    op.drop_table("questions")
    op.drop_table("users")
