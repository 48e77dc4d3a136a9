from pydantic import BaseModel
from typing import Optional, Dict, Any
from enum import Enum

DEFAULT_AVATAR_URL = "https://placehold.co/600x400"

# Enums
class Role(str, Enum):
    admin = "admin"
    member = "member"

class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"

# Models
class User(BaseModel):
    id: str
    username: str
    email: str
    fullname: str
    password_hash: str
    avatar_url: Optional[str] = DEFAULT_AVATAR_URL
    is_email_verified: bool = False
    refresh_token_hash: Optional[str] = None
    forgot_password_token: Optional[str] = None
    forgot_password_expiry: Optional[str] = None
    email_verification_token: Optional[str] = None
    email_verification_expiry: Optional[str] = None
    created_at: str
    updated_at: str

    def public(self) -> "PublicUser":
        return PublicUser.from_doc(self.model_dump())

class PublicUser(BaseModel):
    """User projection safe to return to clients (no digests, no tokens)."""
    id: str
    username: str
    email: str
    fullname: str
    avatar_url: Optional[str] = DEFAULT_AVATAR_URL
    is_email_verified: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: Optional[Dict[str, Any]]) -> Optional["PublicUser"]:
        if not doc:
            return None
        return cls(**{k: doc.get(k) for k in cls.model_fields if k in doc})

class Project(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    created_at: str
    updated_at: str

class Membership(BaseModel):
    id: str
    user_id: str
    project_id: str
    role: Role = Role.member
    created_at: str
    updated_at: str

class Task(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    project_id: str
    assigned_by: str
    assigned_to: str
    status: TaskStatus = TaskStatus.todo
    created_at: str
    updated_at: str

class Subtask(BaseModel):
    id: str
    title: str
    task_id: str
    created_by: str
    is_completed: bool = False
    created_at: str
    updated_at: str

class Note(BaseModel):
    id: str
    content: str
    project_id: str
    created_by: str
    created_at: str
    updated_at: str
