"""
devboard/projects.py

Project Registry: project lifecycle and membership administration.

Creation and deletion touch several tables; each runs as a single
Store.atomic() block so a project never exists without its creator's admin
membership, and a deleted project leaves nothing behind.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from devboard.authz import require_manage, require_view
from devboard.config import IS_DEV
from devboard.errors import ConflictError, NotFoundError
from devboard.membership import MembershipDirectory
from devboard.models import Membership, Project, Role
from devboard.repository import Store


class ProjectRegistry:
    def __init__(self, store: Store, directory: Optional[MembershipDirectory] = None):
        self.store = store
        self.directory = directory or MembershipDirectory(store)

    def find(self, project_id: str) -> Project:
        """
        Raises:
            NotFoundError: If the project does not exist
        """
        doc = self.store.projects.find_by_id(project_id)
        if not doc:
            raise NotFoundError("Project not found")
        return Project(**doc)

    def create(self, name: str, description: Optional[str], creator_id: str) -> Project:
        """
        Create a project and enroll its creator as admin.

        Raises:
            ConflictError: If a project with this name exists
        """
        name = name.strip()
        if self.store.projects.exists(name=name):
            raise ConflictError("Project with this name already exists")

        with self.store.atomic():
            doc = self.store.projects.create({
                "name": name,
                "description": description,
                "created_by": creator_id,
            })
            self.directory.add(creator_id, doc["id"], Role.admin)

        print(f"[PROJECTS] Created project_id={doc['id']} by user_id={creator_id}")
        return Project(**doc)

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        """Projects the user belongs to, each with the user's role."""
        memberships = self.directory.projects_of(user_id)
        projects = {
            p["id"]: Project(**p)
            for p in self.store.projects.find_many(id=[m.project_id for m in memberships])
        }
        return [
            {"project": projects[m.project_id], "role": m.role}
            for m in memberships
            if m.project_id in projects
        ]

    def get(self, project_id: str, user_id: str) -> Dict[str, Any]:
        """
        Project plus its member list.

        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the caller is neither creator nor member
        """
        project = self.find(project_id)
        require_view(project, user_id, self.directory)
        return {"project": project, "members": self.directory.members_of(project_id)}

    def update(self, project_id: str, fields: Dict[str, Any], user_id: str) -> Project:
        """
        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the caller is not the creator
            ConflictError: If renaming onto another project's name
        """
        project = self.find(project_id)
        require_manage(project, user_id, "update")

        patch = {k: v for k, v in fields.items() if k in ("name", "description") and v is not None}
        if "name" in patch:
            patch["name"] = patch["name"].strip()
            existing = self.store.projects.find_one(name=patch["name"])
            if existing and existing["id"] != project_id:
                raise ConflictError("Project with this name already exists")
        if not patch:
            return project

        with self.store.atomic():
            doc = self.store.projects.update_by_id(project_id, patch)
        if IS_DEV:
            print(f"[PROJECTS] Updated project_id={project_id} fields={sorted(patch)}")
        return Project(**doc)

    def delete(self, project_id: str, user_id: str) -> None:
        """
        Delete a project and everything scoped to it.

        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the caller is not the creator
        """
        project = self.find(project_id)
        require_manage(project, user_id, "delete")

        task_ids = [t["id"] for t in self.store.tasks.find_many(project_id=project_id)]
        with self.store.atomic():
            removed_members = self.directory.remove_all(project_id)
            removed_subtasks = self.store.subtasks.delete_many(task_id=task_ids) if task_ids else 0
            removed_tasks = self.store.tasks.delete_many(project_id=project_id)
            removed_notes = self.store.notes.delete_many(project_id=project_id)
            self.store.projects.delete_by_id(project_id)

        print(
            f"[PROJECTS] Deleted project_id={project_id}: members={removed_members}, "
            f"tasks={removed_tasks}, subtasks={removed_subtasks}, notes={removed_notes}"
        )

    def add_member(self, project_id: str, target_user_id: str, role: Role, user_id: str) -> Membership:
        """
        Raises:
            NotFoundError: If the project or the target user does not exist
            ForbiddenError: If the caller is not the creator
            ConflictError: If the target user is already a member
        """
        project = self.find(project_id)
        require_manage(project, user_id, "add members")

        if not self.store.users.exists(id=target_user_id):
            raise NotFoundError("User not found")

        with self.store.atomic():
            return self.directory.add(target_user_id, project_id, role)

    def remove_member(self, project_id: str, membership_id: str, user_id: str) -> bool:
        """
        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the caller is not the creator
        """
        project = self.find(project_id)
        require_manage(project, user_id, "remove members")

        with self.store.atomic():
            return self.directory.remove(membership_id, project_id)
