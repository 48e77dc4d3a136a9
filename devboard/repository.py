"""
devboard/repository.py

Repository layer over SQLite.

Each Repository wraps one table and exposes the document-style interface the
services rely on (find/create/update/delete by id or by filter). Ids are uuid4
hex strings and created_at/updated_at are maintained here, so services never
build SQL themselves.

A Store bundles the repositories over a single connection. Services wrap
every write sequence in Store.atomic(): commit on success, rollback on any
exception. Nothing is committed outside atomic().
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, Iterable, List, Optional, Sequence, Set, Tuple

from devboard.config import IS_DEV
from devboard.errors import ConflictError


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


USER_COLUMNS = (
    "id", "username", "email", "fullname", "password_hash", "avatar_url",
    "is_email_verified", "refresh_token_hash",
    "forgot_password_token", "forgot_password_expiry",
    "email_verification_token", "email_verification_expiry",
    "created_at", "updated_at",
)
PROJECT_COLUMNS = ("id", "name", "description", "created_by", "created_at", "updated_at")
MEMBER_COLUMNS = ("id", "user_id", "project_id", "role", "created_at", "updated_at")
TASK_COLUMNS = (
    "id", "title", "description", "project_id", "assigned_by", "assigned_to",
    "status", "created_at", "updated_at",
)
SUBTASK_COLUMNS = ("id", "title", "task_id", "created_by", "is_completed", "created_at", "updated_at")
NOTE_COLUMNS = ("id", "content", "project_id", "created_by", "created_at", "updated_at")


class Repository:
    """Document-style access to one table."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        table: str,
        columns: Sequence[str],
        bool_columns: Iterable[str] = (),
    ):
        self.conn = conn
        self.table = table
        self.columns: Tuple[str, ...] = tuple(columns)
        self.bool_columns: Set[str] = set(bool_columns)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _check_columns(self, names: Iterable[str]) -> None:
        unknown = [n for n in names if n not in self.columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(unknown)}")

    def _where(self, filters: Dict[str, Any], joiner: str = "AND") -> Tuple[str, List[Any]]:
        self._check_columns(filters)
        clauses: List[str] = []
        params: List[Any] = []
        for column, value in filters.items():
            if isinstance(value, (list, tuple, set)):
                values = list(value)
                if not values:
                    clauses.append("0 = 1")
                    continue
                placeholders = ", ".join("?" for _ in values)
                clauses.append(f"{column} IN ({placeholders})")
                params.extend(values)
            elif value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(self._to_db(column, value))
        if not clauses:
            return "", params
        return " WHERE " + f" {joiner} ".join(clauses), params

    def _order(self, order_by: Optional[str]) -> str:
        if not order_by:
            return ""
        descending = order_by.startswith("-")
        column = order_by.lstrip("-")
        self._check_columns([column])
        direction = "DESC" if descending else "ASC"
        # rowid keeps insertion order stable for equal timestamps
        return f" ORDER BY {column} {direction}, rowid {direction}"

    def _to_db(self, column: str, value: Any) -> Any:
        if column in self.bool_columns and value is not None:
            return 1 if value else 0
        if hasattr(value, "value"):
            # str Enums (roles, statuses)
            return value.value
        return value

    def _from_row(self, row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        doc = dict(row)
        for column in self.bool_columns:
            if column in doc and doc[column] is not None:
                doc[column] = bool(doc[column])
        return doc

    def _select(self) -> str:
        return f"SELECT {', '.join(self.columns)} FROM {self.table}"

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one(id=doc_id)

    def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        where, params = self._where(filters)
        cur = self.conn.execute(self._select() + where + " LIMIT 1", params)
        return self._from_row(cur.fetchone())

    def find_many(self, order_by: Optional[str] = None, **filters: Any) -> List[Dict[str, Any]]:
        where, params = self._where(filters)
        cur = self.conn.execute(self._select() + where + self._order(order_by), params)
        return [self._from_row(row) for row in cur.fetchall()]

    def find_many_any(self, order_by: Optional[str] = None, **filters: Any) -> List[Dict[str, Any]]:
        """Like find_many, but a row matches when ANY filter matches."""
        where, params = self._where(filters, joiner="OR")
        cur = self.conn.execute(self._select() + where + self._order(order_by), params)
        return [self._from_row(row) for row in cur.fetchall()]

    def exists(self, **filters: Any) -> bool:
        return self.find_one(**filters) is not None

    def count(self, **filters: Any) -> int:
        where, params = self._where(filters)
        cur = self.conn.execute(f"SELECT COUNT(*) FROM {self.table}" + where, params)
        return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # writes (callers run these inside Store.atomic())
    # ------------------------------------------------------------------
    def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        now = now_iso()
        record = {"id": new_id(), "created_at": now, "updated_at": now}
        record.update(doc)
        self._check_columns(record)
        names = list(record)
        placeholders = ", ".join("?" for _ in names)
        self.conn.execute(
            f"INSERT INTO {self.table} ({', '.join(names)}) VALUES ({placeholders})",
            [self._to_db(n, record[n]) for n in names],
        )
        return self.find_by_id(record["id"])

    def update_by_id(self, doc_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        patch = {k: v for k, v in patch.items() if k not in ("id", "created_at")}
        self._check_columns(patch)
        patch["updated_at"] = now_iso()
        assignments = ", ".join(f"{name} = ?" for name in patch)
        params = [self._to_db(n, v) for n, v in patch.items()]
        cur = self.conn.execute(
            f"UPDATE {self.table} SET {assignments} WHERE id = ?",
            params + [doc_id],
        )
        if cur.rowcount == 0:
            return None
        return self.find_by_id(doc_id)

    def delete_by_id(self, doc_id: str) -> bool:
        cur = self.conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (doc_id,))
        return cur.rowcount > 0

    def delete_many(self, **filters: Any) -> int:
        if not filters:
            raise ValueError(f"Refusing unfiltered delete on {self.table}")
        where, params = self._where(filters)
        cur = self.conn.execute(f"DELETE FROM {self.table}" + where, params)
        return cur.rowcount


class Store:
    """All repositories over one connection, plus transaction control."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.users = Repository(conn, "users", USER_COLUMNS, bool_columns=("is_email_verified",))
        self.projects = Repository(conn, "projects", PROJECT_COLUMNS)
        self.members = Repository(conn, "project_members", MEMBER_COLUMNS)
        self.tasks = Repository(conn, "tasks", TASK_COLUMNS)
        self.subtasks = Repository(conn, "subtasks", SUBTASK_COLUMNS, bool_columns=("is_completed",))
        self.notes = Repository(conn, "notes", NOTE_COLUMNS)

    @contextmanager
    def atomic(self) -> Generator["Store", None, None]:
        try:
            yield self
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            if IS_DEV:
                print(f"[DB] Integrity error, rolled back: {e}")
            raise ConflictError("Resource already exists") from e
        except BaseException:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()

    def close(self) -> None:
        self.conn.close()
