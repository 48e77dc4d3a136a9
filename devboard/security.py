"""
devboard/security.py

Credential and token capabilities used by the identity store:

- PasswordHasher: bcrypt digests for user passwords
- TokenIssuer: signed JWT access/refresh tokens (PyJWT, HS256)
- OneTimeTokenFactory: email-verification / password-reset tokens

One-time tokens follow a split design: the client-facing token goes out by
email, only its SHA-256 hash is stored. A leaked database therefore holds no
usable tokens, and the expiry bounds replay.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from devboard.config import Settings
from devboard.errors import UnauthorizedError, ValidationError

MAX_PASSWORD_BYTES = 72


# --------------------------------------------------------------------
# Token Utilities
# --------------------------------------------------------------------

def hash_token(token: str) -> str:
    """Hash a token for secure storage (SHA-256)."""
    return hashlib.sha256(token.encode()).hexdigest()


def verify_token_hash(token: str, token_hash: Optional[str]) -> bool:
    """Verify a token against its stored hash."""
    if not token_hash:
        return False
    return secrets.compare_digest(hash_token(token), token_hash)


class PasswordHasher:
    # One throwaway digest per work factor, shared across instances
    _dummy_digests: Dict[int, str] = {}

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """
        Raises:
            ValidationError: If the password exceeds bcrypt's 72-byte input limit
        """
        encoded = plain.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                "Invalid data",
                errors=[{"field": "password", "message": f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"}],
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode()

    def dummy_digest(self) -> str:
        """Digest to verify against when no user matched, so both paths cost one bcrypt check."""
        if self.rounds not in self._dummy_digests:
            self._dummy_digests[self.rounds] = self.hash(secrets.token_hex(16))
        return self._dummy_digests[self.rounds]

    def verify(self, plain: str, digest: str) -> bool:
        if not digest:
            return False
        encoded = plain.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode())
        except ValueError:
            # malformed digest
            return False


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Signs and verifies the JWTs handed to clients."""

    ACCESS = "access"
    REFRESH = "refresh"

    def __init__(self, settings: Settings):
        self.settings = settings

    def sign(self, claims: Dict[str, Any], ttl: timedelta, secret: str) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + ttl
        # jti keeps two tokens issued in the same second distinct
        payload.setdefault("jti", uuid.uuid4().hex)
        return jwt.encode(payload, secret, algorithm=self.settings.algorithm)

    def decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        """
        Verify a JWT and return its payload.

        Raises:
            UnauthorizedError: If the token is expired, invalid or of the wrong type
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[self.settings.algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid token")
        if payload.get("type") != expected_type or not payload.get("sub"):
            raise UnauthorizedError("Invalid token payload")
        return payload

    def access_token(self, user_id: str, email: str, username: str) -> str:
        return self.sign(
            {"sub": user_id, "email": email, "username": username, "type": self.ACCESS},
            timedelta(minutes=self.settings.access_token_minutes),
            self.settings.access_token_secret,
        )

    def refresh_token(self, user_id: str) -> str:
        return self.sign(
            {"sub": user_id, "type": self.REFRESH},
            timedelta(days=self.settings.refresh_token_days),
            self.settings.refresh_token_secret,
        )

    def issue_pair(self, user_id: str, email: str, username: str) -> TokenPair:
        return TokenPair(
            access_token=self.access_token(user_id, email, username),
            refresh_token=self.refresh_token(user_id),
        )

    def decode_access(self, token: str) -> Dict[str, Any]:
        return self.decode(token, self.settings.access_token_secret, self.ACCESS)

    def decode_refresh(self, token: str) -> Dict[str, Any]:
        return self.decode(token, self.settings.refresh_token_secret, self.REFRESH)


@dataclass(frozen=True)
class OneTimeToken:
    client_token: str
    server_hash: str
    expiry: str  # ISO timestamp (UTC)


class OneTimeTokenFactory:
    def __init__(self, minutes: int = 20):
        self.minutes = minutes

    def generate(self) -> OneTimeToken:
        client_token = secrets.token_hex(20)
        expiry = datetime.now(timezone.utc) + timedelta(minutes=self.minutes)
        return OneTimeToken(
            client_token=client_token,
            server_hash=self.derive(client_token),
            expiry=expiry.isoformat(),
        )

    def derive(self, client_token: str) -> str:
        return hash_token(client_token)

    @staticmethod
    def is_live(expiry: Optional[str]) -> bool:
        """True while the stored expiry lies in the future."""
        if not expiry:
            return False
        try:
            expires_at = datetime.fromisoformat(expiry)
        except ValueError:
            return False
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) < expires_at
