"""
devboard/authz.py

Project-level authorization.

Single source of truth for who may read and who may manage a project. All
services go through these predicates instead of comparing ids inline.

Rules:
- view:   project creator OR any membership in the project
- manage: project creator only

Memberships record a role (admin/member), but manage rights are not derived
from it: an "admin" member who did not create the project cannot manage it.
Granting admins manage rights means changing can_manage() and nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass

from devboard.config import Settings
from devboard.errors import ForbiddenError
from devboard.membership import MembershipDirectory
from devboard.models import Project


def is_creator(project: Project, user_id: str) -> bool:
    return project.created_by == user_id


def can_view(project: Project, user_id: str, directory: MembershipDirectory) -> bool:
    return is_creator(project, user_id) or directory.is_member(user_id, project.id)


def can_manage(project: Project, user_id: str) -> bool:
    return is_creator(project, user_id)


def require_view(project: Project, user_id: str, directory: MembershipDirectory) -> None:
    """
    Raises:
        ForbiddenError: If the user is neither the creator nor a member
    """
    if not can_view(project, user_id, directory):
        print(f"[AUTHZ] View denied: user_id={user_id}, project_id={project.id}")
        raise ForbiddenError("You don't have access to this project")


def require_manage(project: Project, user_id: str, action: str = "manage this project") -> None:
    """
    Raises:
        ForbiddenError: If the user is not the project creator
    """
    if not can_manage(project, user_id):
        print(f"[AUTHZ] Manage denied: user_id={user_id}, project_id={project.id}, action={action}")
        raise ForbiddenError(f"Only project creator can {action}")


@dataclass(frozen=True)
class AccessPolicy:
    """
    Membership checks on paths that historically skipped them.

    task_list_members_only: listing tasks by project id requires view access.
    notes_members_only: creating, listing and reading notes requires view access.

    Both default to off, which keeps those paths open to any authenticated
    user. Turning them on closes the gap without touching call sites.
    """
    task_list_members_only: bool = False
    notes_members_only: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccessPolicy":
        return cls(
            task_list_members_only=settings.task_list_members_only,
            notes_members_only=settings.notes_members_only,
        )
