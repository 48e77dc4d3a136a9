# devboard/db.py
# SQLite connection helpers and schema bootstrap

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Generator

from devboard.config import DATABASE_PATH, IS_DEV

REPO_ROOT = FsPath(__file__).resolve().parent.parent

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        fullname TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        avatar_url TEXT,
        is_email_verified INTEGER NOT NULL DEFAULT 0,
        refresh_token_hash TEXT,
        forgot_password_token TEXT,
        forgot_password_expiry TEXT,
        email_verification_token TEXT,
        email_verification_expiry TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        description TEXT,
        created_by TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS project_members (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        project_id TEXT NOT NULL,
        role TEXT NOT NULL CHECK (role IN ('admin', 'member')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE(user_id, project_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        project_id TEXT NOT NULL,
        assigned_by TEXT NOT NULL,
        assigned_to TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'todo',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subtasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        task_id TEXT NOT NULL,
        created_by TEXT NOT NULL,
        is_completed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notes (
        id TEXT PRIMARY KEY,
        content TEXT NOT NULL,
        project_id TEXT NOT NULL,
        created_by TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_project_members_project ON project_members(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_by ON tasks(assigned_by)",
    "CREATE INDEX IF NOT EXISTS idx_subtasks_task ON subtasks(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_notes_project_created ON notes(project_id, created_at)",
]


def resolve_db_path(database_path: str = DATABASE_PATH) -> str:
    """Absolute path for a configured database path (":memory:" passes through)."""
    if database_path == ":memory:":
        return database_path
    path = FsPath(database_path)
    if not path.is_absolute():
        path = REPO_ROOT / path
    return str(path)


def connect(database_path: str = DATABASE_PATH) -> sqlite3.Connection:
    """
    Open a SQLite connection with Row factory.

    check_same_thread is off because FastAPI may resolve a dependency and run
    the endpoint on different worker threads; each connection still serves
    exactly one request.
    """
    conn = sqlite3.connect(resolve_db_path(database_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection(database_path: str = DATABASE_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a connection that is always closed."""
    conn = connect(database_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(conn: sqlite3.Connection) -> None:
    """Create tables and indexes (idempotent)."""
    cur = conn.cursor()
    for statement in SCHEMA:
        cur.execute(statement)
    conn.commit()
    if IS_DEV:
        print("[DB] Schema ensured: users, projects, project_members, tasks, subtasks, notes")
