"""
devboard/dependencies.py

FastAPI dependency providers.

Every request gets its own Store (one SQLite connection, closed after the
response). Services are built per request from that Store plus the injected
Settings and Mailer, so tests replace any of them through
app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends

from devboard.authz import AccessPolicy
from devboard.config import Settings, load_settings
from devboard.db import connect
from devboard.identity import IdentityStore
from devboard.mail import Mailer
from devboard.membership import MembershipDirectory
from devboard.notes import NoteLog
from devboard.projects import ProjectRegistry
from devboard.repository import Store
from devboard.tasks import TaskLedger

_settings = load_settings()


def get_settings() -> Settings:
    return _settings


def get_store(settings: Settings = Depends(get_settings)) -> Generator[Store, None, None]:
    store = Store(connect(settings.database_path))
    try:
        yield store
    finally:
        store.close()


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


def get_policy(settings: Settings = Depends(get_settings)) -> AccessPolicy:
    return AccessPolicy.from_settings(settings)


def get_identity_store(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
) -> IdentityStore:
    return IdentityStore(store, settings, mailer)


def get_membership_directory(store: Store = Depends(get_store)) -> MembershipDirectory:
    return MembershipDirectory(store)


def get_project_registry(
    store: Store = Depends(get_store),
    directory: MembershipDirectory = Depends(get_membership_directory),
) -> ProjectRegistry:
    return ProjectRegistry(store, directory)


def get_task_ledger(
    store: Store = Depends(get_store),
    directory: MembershipDirectory = Depends(get_membership_directory),
    policy: AccessPolicy = Depends(get_policy),
) -> TaskLedger:
    return TaskLedger(store, directory, policy)


def get_note_log(
    store: Store = Depends(get_store),
    directory: MembershipDirectory = Depends(get_membership_directory),
    policy: AccessPolicy = Depends(get_policy),
) -> NoteLog:
    return NoteLog(store, directory, policy)
