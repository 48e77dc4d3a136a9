# ---------------------------------------------------------
# devboard/main.py
# DevBoard - Project Management Backend
#
# Run: uvicorn devboard.main:app --reload (from repo root)
#
# - FastAPI + SQLite
# - /api/v1/healthcheck : liveness
# - /api/v1/auth        : register / verify / login / reset / tokens
# - /api/v1/projects    : projects + membership administration
# - /api/v1/tasks       : tasks + subtasks
# - /api/v1/notes       : project notes
# ---------------------------------------------------------

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from devboard.config import IS_DEV, IS_PROD
from devboard.db import get_db_connection, init_db
from devboard.dependencies import get_settings
from devboard.errors import DomainError, status_code_for
from devboard import routes_auth, routes_notes, routes_projects, routes_tasks

app = FastAPI(title="DevBoard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

with get_db_connection(get_settings().database_path) as _conn:
    init_db(_conn)


# ============================================================================
# ERROR TRANSLATION
# ============================================================================
#
# Services raise DomainError subclasses; this is the only place they become
# HTTP responses. Body shape for every failure:
#   {"success": false, "message": "...", "errors": [...]}
#
#   BadRequest -> 400   (validation, invalid assignment, bad/expired token, mismatch)
#   Unauthorized -> 401 Forbidden -> 403 NotFound -> 404 Conflict -> 409
#   Internal -> 500     (message is always generic)
#
# ============================================================================

@app.exception_handler(DomainError)
def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    status = status_code_for(exc.kind)
    if status >= 500:
        print(f"[ERROR] {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status, content={"success": False, "message": "Internal Server Error"})
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> {status} {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: List[Dict[str, Any]] = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"success": False, "message": "Invalid data", "errors": errors})


@app.exception_handler(sqlite3.Error)
def handle_db_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
    # Log error but don't expose internal details
    print(f"[ERROR] DB error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Database error"})


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    print(f"[ERROR] Unhandled on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal Server Error"})


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/api/v1/healthcheck")
def healthcheck() -> Dict[str, Any]:
    return {"success": True, "message": "Server is running"}


app.include_router(routes_auth.router)
app.include_router(routes_projects.router)
app.include_router(routes_tasks.router)
app.include_router(routes_notes.router)
