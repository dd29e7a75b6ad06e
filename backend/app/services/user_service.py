"""
CuriousDog Backend — User Service
===================================

What:  Account registration, login, profile reads and updates, profile pictures.
How:   Composes UserRepository, AuthService and FileService.
Who:   Called by the auth and users route handlers.

Every method receives the acting user's id explicitly (or none, for
registration, login and public profiles).
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AuthenticationError,
    ConflictError,
    CuriousDogError,
    DatabaseError,
    NotFoundError,
)
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.user import AuthResponse, UserProfile, UserResponse
from app.services.auth_service import auth_service
from app.services.file_service import file_service

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for accounts.

    Responsibilities:
        - register() / login():        issue access tokens
        - get_account():               the actor's own account
        - get_profile():               public profile of any user
        - update_account():            change username
        - update_profile_picture():    store an upload and point the account at it
    """

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=auth_service.create_access_token(user.id),
            expires_in=auth_service.token_lifetime_seconds,
            user=UserResponse.model_validate(user),
        )

    async def _require_user(self, users: UserRepository, user_id: int) -> User:
        user = await users.get_profile(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> AuthResponse:
        """
        Create an account and log it in.

        Raises:
            ConflictError: username or email already taken
        """
        try:
            users = UserRepository(db)
            if await users.find_by_username(username) is not None:
                raise ConflictError(
                    message="That username is already taken",
                    context={"field": "username"},
                )
            if await users.find_by_email(email) is not None:
                raise ConflictError(
                    message="An account with that email already exists",
                    context={"field": "email"},
                )

            user = await users.insert(
                username=username,
                email=email,
                password_hash=auth_service.hash_password(password),
            )
            logger.info("User %s registered", user.id)
            return self._auth_response(user)

        except CuriousDogError:
            raise
        except IntegrityError:
            # Lost a race against a concurrent registration with the same name/email
            raise ConflictError(message="That username or email is already registered")
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not create your account. Please try again.")

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        """
        Raises:
            AuthenticationError: unknown email or wrong password (same message for both)
        """
        try:
            user = await UserRepository(db).find_by_email(email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError()

        if user is None or not auth_service.verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError(message="Invalid email or password")

        logger.info("User %s logged in", user.id)
        return self._auth_response(user)

    async def get_account(self, db: AsyncSession, actor_id: int) -> UserResponse:
        try:
            user = await self._require_user(UserRepository(db), actor_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", actor_id, str(e))
            raise DatabaseError()
        return UserResponse.model_validate(user)

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserProfile:
        try:
            user = await self._require_user(UserRepository(db), user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError()
        return UserProfile.model_validate(user)

    async def update_account(
        self,
        db: AsyncSession,
        actor_id: int,
        username: Optional[str] = None,
    ) -> UserResponse:
        """
        Apply a partial update to the actor's account.

        Raises:
            ConflictError: the new username belongs to someone else
        """
        try:
            users = UserRepository(db)
            user = await self._require_user(users, actor_id)

            changes = {}
            if username is not None and username != user.username:
                existing = await users.find_by_username(username)
                if existing is not None and existing.id != actor_id:
                    raise ConflictError(
                        message="That username is already taken",
                        context={"field": "username"},
                    )
                changes["username"] = username

            if changes:
                user = await users.update(user, **changes)
                logger.info("User %s updated fields: %s", actor_id, ", ".join(sorted(changes)))
            return UserResponse.model_validate(user)

        except CuriousDogError:
            raise
        except IntegrityError:
            raise ConflictError(message="That username is already taken")
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", actor_id, str(e), exc_info=True)
            raise DatabaseError(message="Could not update your profile. Please try again.")

    async def update_profile_picture(
        self,
        db: AsyncSession,
        actor_id: int,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> UserResponse:
        """
        Store a new profile picture and point the actor's account at it.

        On success the previous picture file is removed. If the database
        update fails, the newly written file is removed instead.

        Raises:
            ValidationError:  bad extension, size, or content type
            FileStorageError: the file could not be written
        """
        try:
            users = UserRepository(db)
            user = await self._require_user(users, actor_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", actor_id, str(e))
            raise DatabaseError()

        previous_url = user.profile_picture
        absolute_path, relative_path = await file_service.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )

        try:
            user = await users.update(user, profile_picture=file_service.public_url(relative_path))
        except SQLAlchemyError as e:
            await file_service.cleanup_file(absolute_path)
            logger.error("Database error saving picture for user %s: %s", actor_id, str(e))
            raise DatabaseError(message="Could not update your picture. Please try again.")

        previous_path = file_service.resolve_public_url(previous_url)
        if previous_path is not None:
            await file_service.cleanup_file(str(previous_path))

        logger.info("User %s updated profile picture: %s", actor_id, relative_path)
        return UserResponse.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
