"""
devboard/auth_context.py

Authentication context for FastAPI dependency injection.

Contains:
- AuthContext: the acting identity, derived from a verified access token
- require_auth_context: FastAPI dependency for auth enforcement

Protected endpoints take the caller's id from AuthContext only, never from
request bodies or query params.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from devboard.config import IS_DEV
from devboard.dependencies import get_identity_store
from devboard.errors import UnauthorizedError
from devboard.identity import IdentityStore

# auto_error is off so a missing header goes through the same 401 path as a bad token
security = HTTPBearer(auto_error=False)


class AuthContext(BaseModel):
    """
    Identity of the caller for one request.

    Fields:
        user_id: User ID from the token's sub claim (verified against the DB)
        email: User email
        username: Username
        is_email_verified: Whether the user confirmed their email
    """
    user_id: str
    email: str
    username: str
    is_email_verified: bool = False


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    identity: IdentityStore = Depends(get_identity_store),
) -> AuthContext:
    """
    Resolve the acting identity from the bearer access token.

    Raises:
        UnauthorizedError: If the header is missing, the token is invalid or
            expired, or the user no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    user = identity.authenticate(credentials.credentials)
    ctx = AuthContext(
        user_id=user.id,
        email=user.email,
        username=user.username,
        is_email_verified=user.is_email_verified,
    )
    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}")
    return ctx
