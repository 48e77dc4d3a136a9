"""
devboard/tasks.py

Task Ledger: tasks and subtasks scoped to a project.

- Only the project creator creates tasks.
- Only the task's assigner (assigned_by) updates or deletes it.
- The assignee must hold a membership in the task's project, checked at
  creation and on every reassignment.
- Subtasks carry no ownership rule beyond the parent task existing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from devboard.authz import AccessPolicy, require_manage, require_view
from devboard.config import IS_DEV
from devboard.errors import ForbiddenError, InvalidAssignmentError, NotFoundError, ValidationError
from devboard.membership import MembershipDirectory
from devboard.models import Project, PublicUser, Subtask, Task, TaskStatus
from devboard.repository import Store

TASK_FIELDS = ("title", "description", "status", "assigned_to_id")


class TaskLedger:
    def __init__(
        self,
        store: Store,
        directory: Optional[MembershipDirectory] = None,
        policy: Optional[AccessPolicy] = None,
    ):
        self.store = store
        self.directory = directory or MembershipDirectory(store)
        self.policy = policy or AccessPolicy()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _project(self, project_id: str) -> Project:
        doc = self.store.projects.find_by_id(project_id)
        if not doc:
            raise NotFoundError("Project not found")
        return Project(**doc)

    def _task(self, task_id: str) -> Task:
        doc = self.store.tasks.find_by_id(task_id)
        if not doc:
            raise NotFoundError("Task not found")
        return Task(**doc)

    def _require_assignable(self, user_id: str, project_id: str) -> None:
        if not self.directory.is_member(user_id, project_id):
            print(f"[TASKS] Invalid assignment: user_id={user_id} is not a member of project_id={project_id}")
            raise InvalidAssignmentError()

    def _annotate(self, tasks: List[Task]) -> List[Dict[str, Any]]:
        """Attach project name and public assigner/assignee profiles."""
        user_ids = {t.assigned_to for t in tasks} | {t.assigned_by for t in tasks}
        users = {u["id"]: u for u in self.store.users.find_many(id=list(user_ids))}
        projects = {
            p["id"]: p["name"]
            for p in self.store.projects.find_many(id=list({t.project_id for t in tasks}))
        }
        return [
            {
                "task": task,
                "project_name": projects.get(task.project_id),
                "assigned_to_user": PublicUser.from_doc(users.get(task.assigned_to)),
                "assigned_by_user": PublicUser.from_doc(users.get(task.assigned_by)),
            }
            for task in tasks
        ]

    # ------------------------------------------------------------------
    # tasks
    # ------------------------------------------------------------------
    def create(
        self,
        title: str,
        description: Optional[str],
        project_id: str,
        assigned_to_id: str,
        caller_id: str,
    ) -> Task:
        """
        Raises:
            NotFoundError: If the project does not exist
            ForbiddenError: If the caller is not the project creator
            InvalidAssignmentError: If the assignee is not a project member
        """
        project = self._project(project_id)
        require_manage(project, caller_id, "create tasks")
        self._require_assignable(assigned_to_id, project_id)

        with self.store.atomic():
            doc = self.store.tasks.create({
                "title": title.strip(),
                "description": description,
                "project_id": project_id,
                "assigned_by": caller_id,
                "assigned_to": assigned_to_id,
                "status": TaskStatus.todo,
            })
        print(f"[TASKS] Created task_id={doc['id']} in project_id={project_id}")
        return Task(**doc)

    def list(self, caller_id: str, project_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Tasks of a project when project_id is given, otherwise the tasks the
        caller assigned or was assigned.

        Listing by project id checks membership only under
        AccessPolicy.task_list_members_only.
        """
        if project_id:
            if self.policy.task_list_members_only:
                require_view(self._project(project_id), caller_id, self.directory)
            docs = self.store.tasks.find_many(order_by="created_at", project_id=project_id)
        else:
            docs = self.store.tasks.find_many_any(
                order_by="created_at", assigned_to=caller_id, assigned_by=caller_id
            )
        return self._annotate([Task(**d) for d in docs])

    def get(self, task_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the task does not exist
        """
        task = self._task(task_id)
        subtasks = [
            Subtask(**d)
            for d in self.store.subtasks.find_many(order_by="created_at", task_id=task_id)
        ]
        detail = self._annotate([task])[0]
        detail["subtasks"] = subtasks
        return detail

    def update(self, task_id: str, fields: Dict[str, Any], caller_id: str) -> Task:
        """
        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the caller is not the task's assigner
            ValidationError: If status is not a known task status
            InvalidAssignmentError: If the new assignee is not a project member
        """
        task = self._task(task_id)
        if task.assigned_by != caller_id:
            print(f"[AUTHZ] Task update denied: user_id={caller_id}, task_id={task_id}")
            raise ForbiddenError("Only task creator can update")

        patch: Dict[str, Any] = {}
        for key in TASK_FIELDS:
            if fields.get(key) is not None:
                patch[key] = fields[key]

        if "status" in patch:
            try:
                patch["status"] = TaskStatus(patch["status"])
            except ValueError:
                raise ValidationError(
                    "Invalid data",
                    errors=[{"field": "status", "message": f"must be one of {[s.value for s in TaskStatus]}"}],
                )
        if "title" in patch:
            patch["title"] = patch["title"].strip()
        if "assigned_to_id" in patch:
            new_assignee = patch.pop("assigned_to_id")
            self._require_assignable(new_assignee, task.project_id)
            patch["assigned_to"] = new_assignee

        if not patch:
            return task

        with self.store.atomic():
            doc = self.store.tasks.update_by_id(task_id, patch)
        if IS_DEV:
            print(f"[TASKS] Updated task_id={task_id} fields={sorted(patch)}")
        return Task(**doc)

    def delete(self, task_id: str, caller_id: str) -> None:
        """
        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the caller is not the task's assigner
        """
        task = self._task(task_id)
        if task.assigned_by != caller_id:
            print(f"[AUTHZ] Task delete denied: user_id={caller_id}, task_id={task_id}")
            raise ForbiddenError("Only task creator can delete")

        with self.store.atomic():
            removed_subtasks = self.store.subtasks.delete_many(task_id=task_id)
            self.store.tasks.delete_by_id(task_id)
        print(f"[TASKS] Deleted task_id={task_id}, subtasks={removed_subtasks}")

    # ------------------------------------------------------------------
    # subtasks
    # ------------------------------------------------------------------
    def create_subtask(self, task_id: str, title: str, caller_id: str) -> Subtask:
        self._task(task_id)
        with self.store.atomic():
            doc = self.store.subtasks.create({
                "title": title.strip(),
                "task_id": task_id,
                "created_by": caller_id,
                "is_completed": False,
            })
        return Subtask(**doc)

    def update_subtask(self, task_id: str, subtask_id: str, fields: Dict[str, Any]) -> Subtask:
        doc = self.store.subtasks.find_one(id=subtask_id, task_id=task_id)
        if not doc:
            raise NotFoundError("Subtask not found")

        patch: Dict[str, Any] = {}
        if fields.get("title"):
            patch["title"] = fields["title"].strip()
        if fields.get("is_completed") is not None:
            patch["is_completed"] = bool(fields["is_completed"])
        if not patch:
            return Subtask(**doc)

        with self.store.atomic():
            doc = self.store.subtasks.update_by_id(subtask_id, patch)
        return Subtask(**doc)

    def delete_subtask(self, subtask_id: str) -> None:
        if not self.store.subtasks.exists(id=subtask_id):
            raise NotFoundError("Subtask not found")
        with self.store.atomic():
            self.store.subtasks.delete_by_id(subtask_id)
