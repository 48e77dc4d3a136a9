"""
devboard/identity.py

Identity Store: user records, credential checks and the token lifecycle.

Token kinds:
- access token:  signed JWT, short-lived, claims sub/email/username
- refresh token: signed JWT, long-lived, claim sub only; its SHA-256 hash is
                 persisted so logout/rotation can revoke it
- one-time tokens (email verification, password reset): only the hash and
                 expiry are persisted, cleared after a single successful use
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from devboard.config import IS_DEV, Settings
from devboard.errors import (
    ConflictError,
    InvalidOrExpiredError,
    MismatchError,
    NotFoundError,
    UnauthorizedError,
)
from devboard.mail import Mailer, MailContent, email_verification_content, forgot_password_content
from devboard.models import DEFAULT_AVATAR_URL, PublicUser, User
from devboard.repository import Store
from devboard.security import (
    OneTimeTokenFactory,
    PasswordHasher,
    TokenIssuer,
    TokenPair,
    hash_token,
    verify_token_hash,
)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class LoginResult:
    user: PublicUser
    tokens: TokenPair


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_username(username: str) -> str:
    # Usernames are case-insensitive: "Alice" and "alice" are the same account
    return username.strip().lower()


class IdentityStore:
    def __init__(
        self,
        store: Store,
        settings: Settings,
        mailer: Mailer,
        hasher: Optional[PasswordHasher] = None,
        tokens: Optional[TokenIssuer] = None,
        one_time_tokens: Optional[OneTimeTokenFactory] = None,
    ):
        self.store = store
        self.settings = settings
        self.mailer = mailer
        self.hasher = hasher or PasswordHasher(settings.bcrypt_rounds)
        self.tokens = tokens or TokenIssuer(settings)
        self.one_time_tokens = one_time_tokens or OneTimeTokenFactory(settings.one_time_token_minutes)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _get_user(self, user_id: str) -> Optional[User]:
        doc = self.store.users.find_by_id(user_id)
        return User(**doc) if doc else None

    def _dispatch(self, to: str, subject: str, content: MailContent) -> bool:
        # A mail outage must never fail the write that triggered it
        try:
            sent = self.mailer.send(to, subject, content)
        except Exception as e:
            print(f"[MAIL] Dispatch raised, ignored: {type(e).__name__}: {e}")
            return False
        if not sent:
            print(f"[MAIL] Not delivered: subject={subject!r}")
        return sent

    def _issue_tokens(self, user: User) -> TokenPair:
        pair = self.tokens.issue_pair(user.id, user.email, user.username)
        with self.store.atomic():
            self.store.users.update_by_id(user.id, {"refresh_token_hash": hash_token(pair.refresh_token)})
        return pair

    # ------------------------------------------------------------------
    # registration / verification
    # ------------------------------------------------------------------
    def register(self, username: str, email: str, fullname: str, password: str) -> PublicUser:
        """
        Create an unverified user and send the verification email.

        Raises:
            ConflictError: If the username or email is already registered
        """
        username = normalize_username(username)
        email = normalize_email(email)

        if self.store.users.find_many_any(email=email, username=username):
            raise ConflictError("User already exists with email or username")

        verification = self.one_time_tokens.generate()
        with self.store.atomic():
            doc = self.store.users.create({
                "username": username,
                "email": email,
                "fullname": fullname.strip(),
                "password_hash": self.hasher.hash(password),
                "avatar_url": DEFAULT_AVATAR_URL,
                "is_email_verified": False,
                "email_verification_token": verification.server_hash,
                "email_verification_expiry": verification.expiry,
            })
        user = User(**doc)
        print(f"[AUTH] Registered user_id={user.id}")

        verification_url = f"{self.settings.frontend_url}/verify-email?token={verification.client_token}"
        self._dispatch(user.email, "Email Verification", email_verification_content(user.username, verification_url))
        return user.public()

    def verify_email(self, token: str) -> PublicUser:
        """
        Consume an email-verification token.

        Raises:
            InvalidOrExpiredError: If no user holds a live token with this hash
        """
        doc = self.store.users.find_one(email_verification_token=self.one_time_tokens.derive(token))
        if not doc or not OneTimeTokenFactory.is_live(doc["email_verification_expiry"]):
            raise InvalidOrExpiredError()

        with self.store.atomic():
            doc = self.store.users.update_by_id(doc["id"], {
                "is_email_verified": True,
                "email_verification_token": None,
                "email_verification_expiry": None,
            })
        if IS_DEV:
            print(f"[AUTH] Email verified: user_id={doc['id']}")
        return PublicUser.from_doc(doc)

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue an access/refresh token pair.

        Unknown email and wrong password fail identically.

        Raises:
            UnauthorizedError: On any credential failure
        """
        doc = self.store.users.find_one(email=normalize_email(email))
        # Unknown emails still pay for one bcrypt check
        digest = doc["password_hash"] if doc else self.hasher.dummy_digest()
        password_ok = self.hasher.verify(password, digest)
        if not doc or not password_ok:
            print("[AUTH] Login rejected")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user = User(**doc)
        pair = self._issue_tokens(user)
        print(f"[AUTH] Login: user_id={user.id}")
        return LoginResult(user=user.public(), tokens=pair)

    def logout(self, user_id: str) -> None:
        """Revoke the persisted refresh token (idempotent)."""
        with self.store.atomic():
            self.store.users.update_by_id(user_id, {"refresh_token_hash": None})
        if IS_DEV:
            print(f"[AUTH] Logout: user_id={user_id}")

    def rotate_keys(self, user_id: str) -> TokenPair:
        """
        Reissue the token pair for an authenticated user.

        Raises:
            UnauthorizedError: If the user no longer exists
        """
        user = self._get_user(user_id)
        if not user:
            raise UnauthorizedError("User not found")
        return self._issue_tokens(user)

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair (rotation).

        Raises:
            UnauthorizedError: If the token is invalid, expired or revoked
        """
        payload = self.tokens.decode_refresh(refresh_token)
        user = self._get_user(payload["sub"])
        if not user or not verify_token_hash(refresh_token, user.refresh_token_hash):
            print(f"[AUTH] Refresh rejected: sub={payload['sub']}")
            raise UnauthorizedError("Invalid refresh token")
        return self._issue_tokens(user)

    def authenticate(self, access_token: str) -> User:
        """
        Resolve the acting identity from an access token.

        Raises:
            UnauthorizedError: If the token is invalid or the user is gone
        """
        payload = self.tokens.decode_access(access_token)
        user = self._get_user(payload["sub"])
        if not user:
            print(f"[AUTH] User not found: user_id={payload['sub']}")
            raise UnauthorizedError("User not found")
        return user

    def get_profile(self, user_id: str) -> PublicUser:
        user = self._get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user.public()

    # ------------------------------------------------------------------
    # password reset
    # ------------------------------------------------------------------
    def request_password_reset(self, email: str) -> None:
        """
        Issue a reset token and mail the reset link.

        Raises:
            NotFoundError: If no user has this email
        """
        doc = self.store.users.find_one(email=normalize_email(email))
        if not doc:
            raise NotFoundError("User not found")

        reset = self.one_time_tokens.generate()
        with self.store.atomic():
            self.store.users.update_by_id(doc["id"], {
                "forgot_password_token": reset.server_hash,
                "forgot_password_expiry": reset.expiry,
            })
        if IS_DEV:
            print(f"[AUTH] Password reset requested: user_id={doc['id']}")

        reset_url = f"{self.settings.frontend_url}/reset-password?token={reset.client_token}"
        self._dispatch(doc["email"], "Password Reset", forgot_password_content(doc["username"], reset_url))

    def reset_password(self, token: str, new_password: str, confirm_password: str) -> None:
        """
        Consume a reset token and replace the password.

        Raises:
            MismatchError: If the two passwords differ
            InvalidOrExpiredError: If the token is unknown, used or expired
        """
        if new_password != confirm_password:
            raise MismatchError()

        doc = self.store.users.find_one(forgot_password_token=self.one_time_tokens.derive(token))
        if not doc or not OneTimeTokenFactory.is_live(doc["forgot_password_expiry"]):
            raise InvalidOrExpiredError()

        with self.store.atomic():
            self.store.users.update_by_id(doc["id"], {
                "password_hash": self.hasher.hash(new_password),
                "forgot_password_token": None,
                "forgot_password_expiry": None,
            })
        print(f"[AUTH] Password reset: user_id={doc['id']}")
