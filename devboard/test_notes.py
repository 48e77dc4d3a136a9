"""
devboard/test_notes.py

Note log: creator-only edits, newest-first listing, optional membership checks.
"""

import time

import pytest

from devboard.authz import AccessPolicy
from devboard.errors import ForbiddenError, NotFoundError
from devboard.models import Role
from devboard.notes import NoteLog


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def project(projects, alice, bob):
    project = projects.create("Apollo", None, alice.id)
    projects.add_member(project.id, bob.id, Role.member, alice.id)
    return project


def test_create_on_unknown_project(notes, alice):
    with pytest.raises(NotFoundError):
        notes.create("Hello", "missing", alice.id)


def test_list_newest_first_with_creator(notes, project, alice, bob):
    first = notes.create("First", project.id, alice.id)
    time.sleep(0.001)
    second = notes.create("Second", project.id, bob.id)

    listed = notes.list(project.id, alice.id)

    assert [n["note"].id for n in listed] == [second.id, first.id]
    assert listed[0]["created_by_user"].username == "bob"
    assert "password_hash" not in listed[0]["created_by_user"].model_dump()


def test_get_includes_project_name(notes, project, alice):
    note = notes.create("Launch window is Friday", project.id, alice.id)

    detail = notes.get(note.id, alice.id)

    assert detail["note"].content == "Launch window is Friday"
    assert detail["project_name"] == "Apollo"
    assert detail["created_by_user"].id == alice.id


def test_only_creator_updates_or_deletes(notes, store, project, alice, bob):
    note = notes.create("Mine", project.id, bob.id)

    # The project creator has no special rights over someone else's note
    with pytest.raises(ForbiddenError):
        notes.update(note.id, "Overwritten", alice.id)
    with pytest.raises(ForbiddenError):
        notes.delete(note.id, alice.id)
    assert store.notes.find_by_id(note.id)["content"] == "Mine"

    updated = notes.update(note.id, "Still mine", bob.id)
    assert updated["note"].content == "Still mine"

    notes.delete(note.id, bob.id)
    with pytest.raises(NotFoundError):
        notes.get(note.id, bob.id)


def test_notes_open_to_non_members_by_default(notes, project, make_user):
    outsider = make_user("carol")

    notes.create("Drive-by", project.id, outsider.id)

    assert len(notes.list(project.id, outsider.id)) == 1


def test_notes_members_only_policy(store, directory, project, bob, make_user):
    outsider = make_user("carol")
    log = NoteLog(store, directory, AccessPolicy(notes_members_only=True))

    with pytest.raises(ForbiddenError):
        log.create("Drive-by", project.id, outsider.id)
    with pytest.raises(ForbiddenError):
        log.list(project.id, outsider.id)

    note = log.create("Members only", project.id, bob.id)
    with pytest.raises(ForbiddenError):
        log.get(note.id, outsider.id)
