"""
Shared pytest fixtures.

Service tests run against a fresh SQLite file per test and a RecordingMailer;
API tests run the FastAPI app with get_settings/get_mailer overridden to
point at the same temporary database and mailer.
"""

import os
import tempfile

# Point the app's default database at a scratch file BEFORE importing it
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.gettempdir(), "devboard-test.db"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from devboard.authz import AccessPolicy
from devboard.config import Settings
from devboard.db import connect, init_db
from devboard.identity import IdentityStore
from devboard.mail import RecordingMailer
from devboard.membership import MembershipDirectory
from devboard.notes import NoteLog
from devboard.projects import ProjectRegistry
from devboard.repository import Store
from devboard.tasks import TaskLedger

PASSWORD = "secret123"


def token_from_link(link: str) -> str:
    """Extract the client-facing token from a verification/reset link."""
    return link.split("token=", 1)[1]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_path=str(tmp_path / "devboard.db"),
        bcrypt_rounds=4,
        mail_host="",
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
    )


@pytest.fixture
def store(settings):
    conn = connect(settings.database_path)
    init_db(conn)
    store = Store(conn)
    yield store
    store.close()


@pytest.fixture
def mailer(settings):
    return RecordingMailer(settings)


@pytest.fixture
def identity(store, settings, mailer):
    return IdentityStore(store, settings, mailer)


@pytest.fixture
def directory(store):
    return MembershipDirectory(store)


@pytest.fixture
def projects(store, directory):
    return ProjectRegistry(store, directory)


@pytest.fixture
def tasks(store, directory):
    return TaskLedger(store, directory, AccessPolicy())


@pytest.fixture
def notes(store, directory):
    return NoteLog(store, directory, AccessPolicy())


@pytest.fixture
def make_user(identity):
    """Register a user and return its PublicUser."""
    def _make(username: str):
        return identity.register(username, f"{username}@example.com", username.title(), PASSWORD)
    return _make


@pytest.fixture
def client(settings, mailer):
    from devboard.dependencies import get_mailer, get_settings
    from devboard.main import app

    conn = connect(settings.database_path)
    init_db(conn)
    conn.close()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
