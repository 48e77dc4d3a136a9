"""
devboard/notes.py

Note Log: free-text notes scoped to a project.

Only a note's creator may edit or delete it, whatever their project role.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from devboard.authz import AccessPolicy, require_view
from devboard.config import IS_DEV
from devboard.errors import ForbiddenError, NotFoundError
from devboard.membership import MembershipDirectory
from devboard.models import Note, Project, PublicUser
from devboard.repository import Store


class NoteLog:
    def __init__(
        self,
        store: Store,
        directory: Optional[MembershipDirectory] = None,
        policy: Optional[AccessPolicy] = None,
    ):
        self.store = store
        self.directory = directory or MembershipDirectory(store)
        self.policy = policy or AccessPolicy()

    def _project(self, project_id: str, caller_id: str) -> Project:
        doc = self.store.projects.find_by_id(project_id)
        if not doc:
            raise NotFoundError("Project not found")
        project = Project(**doc)
        if self.policy.notes_members_only:
            require_view(project, caller_id, self.directory)
        return project

    def _note(self, note_id: str) -> Note:
        doc = self.store.notes.find_by_id(note_id)
        if not doc:
            raise NotFoundError("Note not found")
        return Note(**doc)

    def _require_creator(self, note: Note, caller_id: str, action: str) -> None:
        if note.created_by != caller_id:
            print(f"[AUTHZ] Note {action} denied: user_id={caller_id}, note_id={note.id}")
            raise ForbiddenError(f"Only note creator can {action}")

    def _with_creator(self, note: Note) -> Dict[str, Any]:
        return {"note": note, "created_by_user": PublicUser.from_doc(self.store.users.find_by_id(note.created_by))}

    def create(self, content: str, project_id: str, caller_id: str) -> Note:
        """
        Raises:
            NotFoundError: If the project does not exist
        """
        self._project(project_id, caller_id)
        with self.store.atomic():
            doc = self.store.notes.create({
                "content": content,
                "project_id": project_id,
                "created_by": caller_id,
            })
        if IS_DEV:
            print(f"[NOTES] Created note_id={doc['id']} in project_id={project_id}")
        return Note(**doc)

    def list(self, project_id: str, caller_id: str) -> List[Dict[str, Any]]:
        """Notes of a project, newest first, each with its creator's public profile."""
        self._project(project_id, caller_id)
        notes = [Note(**d) for d in self.store.notes.find_many(order_by="-created_at", project_id=project_id)]
        users = {u["id"]: u for u in self.store.users.find_many(id=list({n.created_by for n in notes}))}
        return [
            {"note": note, "created_by_user": PublicUser.from_doc(users.get(note.created_by))}
            for note in notes
        ]

    def get(self, note_id: str, caller_id: str) -> Dict[str, Any]:
        note = self._note(note_id)
        project = self._project(note.project_id, caller_id)
        detail = self._with_creator(note)
        detail["project_name"] = project.name
        return detail

    def update(self, note_id: str, content: Optional[str], caller_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the note does not exist
            ForbiddenError: If the caller did not create the note
        """
        note = self._note(note_id)
        self._require_creator(note, caller_id, "update")
        if content is not None:
            with self.store.atomic():
                note = Note(**self.store.notes.update_by_id(note_id, {"content": content}))
        return self._with_creator(note)

    def delete(self, note_id: str, caller_id: str) -> None:
        """
        Raises:
            NotFoundError: If the note does not exist
            ForbiddenError: If the caller did not create the note
        """
        note = self._note(note_id)
        self._require_creator(note, caller_id, "delete")
        with self.store.atomic():
            self.store.notes.delete_by_id(note_id)
        print(f"[NOTES] Deleted note_id={note_id}")
