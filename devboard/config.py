# devboard/config.py
# Environment-aware configuration for the DevBoard backend

import os
from dataclasses import dataclass, field
from typing import List, Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


# JWT configuration (access and refresh tokens are signed with separate secrets)
ACCESS_TOKEN_SECRET = os.environ.get("ACCESS_TOKEN_SECRET", "dev-access-secret")
REFRESH_TOKEN_SECRET = os.environ.get("REFRESH_TOKEN_SECRET", "dev-refresh-secret")
ALGORITHM = "HS256"

# Token lifetimes
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "15"))
REFRESH_TOKEN_DAYS = int(os.environ.get("REFRESH_TOKEN_DAYS", "7"))
ONE_TIME_TOKEN_MINUTES = int(os.environ.get("ONE_TIME_TOKEN_MINUTES", "20"))

# bcrypt work factor
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

# Database configuration (SQLite file, relative paths resolve against the repo root)
DATABASE_PATH = os.environ.get("DATABASE_PATH", "devboard.db")

# Mail delivery (SMTP). Leaving MAIL_HOST empty disables delivery.
MAIL_HOST = os.environ.get("MAIL_HOST", "").strip()
MAIL_PORT = int(os.environ.get("MAIL_PORT", "2525"))
MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
MAIL_SENDER = os.environ.get("MAIL_SENDER", "no-reply@devboard.local")

# Links embedded in verification / reset emails
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# Opt-in membership checks on task listing and notes
TASK_LIST_MEMBERS_ONLY = _env_flag("TASK_LIST_MEMBERS_ONLY")
NOTES_MEMBERS_ONLY = _env_flag("NOTES_MEMBERS_ONLY")

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    """
    Explicit configuration handed to services and the mailer at construction.

    Services never read the environment themselves; tests build their own
    Settings instead of patching module globals.
    """
    access_token_secret: str = ACCESS_TOKEN_SECRET
    refresh_token_secret: str = REFRESH_TOKEN_SECRET
    algorithm: str = ALGORITHM
    access_token_minutes: int = ACCESS_TOKEN_MINUTES
    refresh_token_days: int = REFRESH_TOKEN_DAYS
    one_time_token_minutes: int = ONE_TIME_TOKEN_MINUTES
    bcrypt_rounds: int = BCRYPT_ROUNDS
    database_path: str = DATABASE_PATH
    mail_host: str = MAIL_HOST
    mail_port: int = MAIL_PORT
    mail_username: str = MAIL_USERNAME
    mail_password: str = MAIL_PASSWORD
    mail_sender: str = MAIL_SENDER
    frontend_url: str = FRONTEND_URL
    task_list_members_only: bool = TASK_LIST_MEMBERS_ONLY
    notes_members_only: bool = NOTES_MEMBERS_ONLY
    cors_origins: List[str] = field(default_factory=lambda: list(CORS_ORIGINS))


def load_settings() -> Settings:
    """Build Settings from the environment-derived module constants."""
    return Settings()


print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Database: SQLite ({DATABASE_PATH})")
print(f"[CONFIG] Access token: {ACCESS_TOKEN_MINUTES} minutes")
print(f"[CONFIG] Refresh token: {REFRESH_TOKEN_DAYS} days")
print(f"[CONFIG] One-time token: {ONE_TIME_TOKEN_MINUTES} minutes")
print(f"[CONFIG] Mail delivery: {'SMTP ' + MAIL_HOST if MAIL_HOST else 'disabled'}")
