"""
devboard/membership.py

Membership Directory: the (user, project) -> role mapping.

Every other component asks this directory whether a user belongs to a
project. Writes here do not open their own transaction; callers run them
inside Store.atomic() so they compose with project creation and deletion.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from devboard.config import IS_DEV
from devboard.errors import ConflictError
from devboard.models import Membership, PublicUser, Role
from devboard.repository import Store


class MembershipDirectory:
    def __init__(self, store: Store):
        self.store = store

    def find(self, user_id: str, project_id: str) -> Optional[Membership]:
        doc = self.store.members.find_one(user_id=user_id, project_id=project_id)
        return Membership(**doc) if doc else None

    def is_member(self, user_id: str, project_id: str) -> bool:
        return self.store.members.exists(user_id=user_id, project_id=project_id)

    def role_of(self, user_id: str, project_id: str) -> Optional[Role]:
        membership = self.find(user_id, project_id)
        return membership.role if membership else None

    def add(self, user_id: str, project_id: str, role: Role = Role.member) -> Membership:
        """
        Enroll a user in a project.

        Raises:
            ConflictError: If the user already holds a membership in the project
        """
        if self.is_member(user_id, project_id):
            raise ConflictError("User is already a member")
        doc = self.store.members.create({
            "user_id": user_id,
            "project_id": project_id,
            "role": Role(role),
        })
        if IS_DEV:
            print(f"[MEMBERS] Added user_id={user_id} to project_id={project_id} as {Role(role).value}")
        return Membership(**doc)

    def remove(self, membership_id: str, project_id: str) -> bool:
        # Scoped by project so an id from another project never matches
        removed = self.store.members.delete_many(id=membership_id, project_id=project_id) > 0
        if IS_DEV:
            print(f"[MEMBERS] Remove membership_id={membership_id} project_id={project_id} removed={removed}")
        return removed

    def remove_all(self, project_id: str) -> int:
        return self.store.members.delete_many(project_id=project_id)

    def members_of(self, project_id: str) -> List[Dict[str, Any]]:
        """Memberships of a project, each with the member's public profile."""
        memberships = self.store.members.find_many(order_by="created_at", project_id=project_id)
        users = {
            u["id"]: u
            for u in self.store.users.find_many(id=[m["user_id"] for m in memberships])
        }
        return [
            {
                "id": m["id"],
                "role": m["role"],
                "created_at": m["created_at"],
                "user": PublicUser.from_doc(users.get(m["user_id"])),
            }
            for m in memberships
        ]

    def projects_of(self, user_id: str) -> List[Membership]:
        return [
            Membership(**doc)
            for doc in self.store.members.find_many(order_by="created_at", user_id=user_id)
        ]
