"""
CuriousDog Backend — Request-Scoped Dependencies
==================================================

What:  Resolves the authenticated actor for a request.
How:   Reads the `Authorization: Bearer <token>` header, verifies it with
       AuthService, and returns an immutable Actor value.
Who:   Route handlers declare `actor: Actor = Depends(get_current_actor)` and
       pass `actor.user_id` explicitly into service calls.

Nothing is attached to the request object and nothing is stored in module
state: the actor exists only as the dependency's return value.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError
from app.services.auth_service import auth_service

# auto_error=False: missing credentials raise our AuthenticationError (401 in
# the standard error format) instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False, description="JWT from /api/auth/login")


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing the current request."""

    user_id: int


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Authentication required")
    user_id = auth_service.decode_access_token(credentials.credentials)
    return Actor(user_id=user_id)
