"""
devboard/schemas.py

Pydantic request/response schemas for the HTTP API.
Responses embed PublicUser projections only; no schema here carries password
digests or tokens other than the ones a login/rotation hands out.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from devboard.models import Note, Project, PublicUser, Role, Subtask, Task, TaskStatus
from devboard.security import MAX_PASSWORD_BYTES


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _bcrypt_sized(v):
    # bcrypt reads at most 72 bytes; multi-byte characters count per byte
    if isinstance(v, str) and len(v.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return v


# ========================================================================
# AUTH SCHEMAS
# ========================================================================

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Unique username, case-insensitive (stored lower-case)")
    email: EmailStr = Field(..., description="Unique email address")
    fullname: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=6, max_length=72, description="6-72 characters, at most 72 bytes")

    @field_validator("username", "fullname", mode="before")
    @classmethod
    def trim(cls, v):
        return _strip(v)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _bcrypt_sized(v)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _bcrypt_sized(v)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=72)
    confirm_password: str = Field(..., min_length=6, max_length=72)

    @field_validator("new_password", "confirm_password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _bcrypt_sized(v)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    user: PublicUser
    message: str = "User registered. Verification email sent."


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenResponse):
    user: PublicUser


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ========================================================================
# PROJECT SCHEMAS
# ========================================================================

class ProjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return _strip(v)


class ProjectUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return _strip(v)


class AddMemberRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    role: Role = Role.member


class ProjectWithRole(BaseModel):
    project: Project
    role: Role


class MemberResponse(BaseModel):
    id: str
    role: Role
    created_at: str
    user: Optional[PublicUser] = None


class ProjectDetailResponse(BaseModel):
    project: Project
    members: List[MemberResponse]


# ========================================================================
# TASK SCHEMAS
# ========================================================================

class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    project_id: str = Field(..., min_length=1)
    assigned_to_id: str = Field(..., min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _strip(v)


class TaskUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[TaskStatus] = None
    assigned_to_id: Optional[str] = Field(None, min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _strip(v)


class TaskView(BaseModel):
    task: Task
    project_name: Optional[str] = None
    assigned_to_user: Optional[PublicUser] = None
    assigned_by_user: Optional[PublicUser] = None


class TaskDetailResponse(TaskView):
    subtasks: List[Subtask] = Field(default_factory=list)


class SubtaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _strip(v)


class SubtaskUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    is_completed: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _strip(v)


# ========================================================================
# NOTE SCHEMAS
# ========================================================================

class NoteCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    project_id: str = Field(..., min_length=1)


class NoteUpdateRequest(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=10000)


class NoteView(BaseModel):
    note: Note
    created_by_user: Optional[PublicUser] = None


class NoteDetailResponse(NoteView):
    project_name: Optional[str] = None
