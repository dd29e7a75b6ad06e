"""
CuriousDog Backend — User Service Tests
=========================================

What:  Registration, login, account updates, and profile pictures.
How:   Real per-test SQLite database; the picture tests swap the module's
       file_service for one rooted in a temp directory and stub MIME
       detection, so libmagic is not needed.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.services.file_service import FileService
from app.services.user_service import UserService


class TestRegisterAndLogin:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_register_returns_token_and_account(self, db_session):
        result = await self.service.register(
            db_session, username="alice", email="Alice@Example.com", password="Secret#123",
        )

        assert result.token
        assert result.token_type == "bearer"
        assert result.user.username == "alice"
        assert result.user.email == "alice@example.com"
        assert result.user.profile_picture is None

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts_case_insensitively(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "Secret#123")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.register(db_session, "ALICE", "other@example.com", "Secret#123")
        assert exc_info.value.context["field"] == "username"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "Secret#123")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.register(db_session, "alice2", "ALICE@example.com", "Secret#123")
        assert exc_info.value.context["field"] == "email"

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, db_session):
        registered = await self.service.register(db_session, "alice", "alice@example.com", "Secret#123")

        result = await self.service.login(db_session, email="ALICE@example.com", password="Secret#123")

        assert result.user.id == registered.user.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "Secret#123")

        with pytest.raises(AuthenticationError) as wrong_password:
            await self.service.login(db_session, "alice@example.com", "Wrong#123")
        with pytest.raises(AuthenticationError) as unknown_email:
            await self.service.login(db_session, "nobody@example.com", "Secret#123")

        assert wrong_password.value.message == unknown_email.value.message

    @pytest.mark.asyncio
    async def test_database_failure_during_login_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(DatabaseError):
            await self.service.login(mock_db_session, "alice@example.com", "Secret#123")


class TestAccount:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_public_profile_has_no_email(self, db_session, make_user):
        user_id = await make_user("bob")

        profile = await self.service.get_profile(db_session, user_id)

        assert profile.username == "bob"
        assert "email" not in profile.model_dump()

    @pytest.mark.asyncio
    async def test_unknown_profile_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_profile(db_session, 9999)

    @pytest.mark.asyncio
    async def test_update_username(self, db_session, make_user):
        user_id = await make_user("bob")

        result = await self.service.update_account(db_session, user_id, username="robert")

        assert result.username == "robert"

    @pytest.mark.asyncio
    async def test_update_to_taken_username_conflicts(self, db_session, make_user):
        await make_user("bob")
        carol = await make_user("carol")

        with pytest.raises(ConflictError):
            await self.service.update_account(db_session, carol, username="Bob")

    @pytest.mark.asyncio
    async def test_changing_case_of_own_username_is_allowed(self, db_session, make_user):
        user_id = await make_user("bob")

        result = await self.service.update_account(db_session, user_id, username="Bob")

        assert result.username == "Bob"


class TestProfilePicture:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_upload_sets_url_and_replaces_previous_file(
        self, db_session, make_user, temp_storage, sample_png_bytes
    ):
        user_id = await make_user()
        storage = FileService(storage_root=temp_storage)

        with patch("app.services.user_service.file_service", storage), \
             patch.object(FileService, "validate_mime_type", return_value="image/png"):
            first = await self.service.update_profile_picture(
                db_session, user_id, "me.png", sample_png_bytes, len(sample_png_bytes),
            )
            first_path = storage.resolve_public_url(first.profile_picture)
            assert first_path.is_file()

            second = await self.service.update_profile_picture(
                db_session, user_id, "me2.png", sample_png_bytes, len(sample_png_bytes),
            )

        assert second.profile_picture.startswith("/api/files/")
        assert second.profile_picture.endswith(".png")
        assert second.profile_picture != first.profile_picture
        assert storage.resolve_public_url(second.profile_picture).is_file()
        assert not first_path.exists()

    @pytest.mark.asyncio
    async def test_rejected_upload_leaves_account_unchanged(self, db_session, make_user, temp_storage):
        user_id = await make_user()
        storage = FileService(storage_root=temp_storage)

        with patch("app.services.user_service.file_service", storage):
            with pytest.raises(ValidationError):
                await self.service.update_profile_picture(
                    db_session, user_id, "notes.pdf", b"%PDF-1.4", 8,
                )

        account = await self.service.get_account(db_session, user_id)
        assert account.profile_picture is None
        assert list(Path(temp_storage).rglob("*.*")) == []
