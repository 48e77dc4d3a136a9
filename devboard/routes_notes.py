"""
devboard/routes_notes.py

Project note endpoints. Edit and delete are limited to the note's creator.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path

from devboard.auth_context import AuthContext, require_auth_context
from devboard.dependencies import get_note_log
from devboard.models import Note
from devboard.notes import NoteLog
from devboard.schemas import (
    MessageResponse,
    NoteCreateRequest,
    NoteDetailResponse,
    NoteUpdateRequest,
    NoteView,
)

router = APIRouter(
    prefix="/api/v1/notes",
    tags=["notes"],
)


@router.post("", response_model=Note, status_code=201)
def create_note(
    req: NoteCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    notes: NoteLog = Depends(get_note_log),
):
    return notes.create(req.content, req.project_id, ctx.user_id)


@router.get("/note/{note_id}", response_model=NoteDetailResponse)
def get_note(
    note_id: str = Path(..., description="Note ID"),
    ctx: AuthContext = Depends(require_auth_context),
    notes: NoteLog = Depends(get_note_log),
):
    return notes.get(note_id, ctx.user_id)


@router.get("/{project_id}", response_model=List[NoteView])
def list_notes(
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    notes: NoteLog = Depends(get_note_log),
):
    return notes.list(project_id, ctx.user_id)


@router.put("/{note_id}", response_model=NoteView)
def update_note(
    req: NoteUpdateRequest,
    note_id: str = Path(..., description="Note ID"),
    ctx: AuthContext = Depends(require_auth_context),
    notes: NoteLog = Depends(get_note_log),
):
    return notes.update(note_id, req.content, ctx.user_id)


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(
    note_id: str = Path(..., description="Note ID"),
    ctx: AuthContext = Depends(require_auth_context),
    notes: NoteLog = Depends(get_note_log),
):
    notes.delete(note_id, ctx.user_id)
    return MessageResponse(message="Note deleted successfully")
