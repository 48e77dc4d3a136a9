"""
devboard/test_projects.py

Project registry: creation atomicity, creator-only management, cascade delete.
"""

import pytest

from devboard.errors import ConflictError, ForbiddenError, NotFoundError
from devboard.models import Role


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def project(projects, alice):
    return projects.create("Apollo", "Moon launch", alice.id)


def test_create_enrolls_creator_as_single_admin(store, project, alice):
    members = store.members.find_many(project_id=project.id)

    assert project.created_by == alice.id
    assert len(members) == 1
    assert members[0]["user_id"] == alice.id
    assert members[0]["role"] == "admin"


def test_create_duplicate_name_conflicts(projects, store, project, bob):
    with pytest.raises(ConflictError):
        projects.create("Apollo", None, bob.id)

    assert store.projects.count() == 1


def test_create_rolls_back_when_membership_fails(projects, store, alice, monkeypatch):
    def broken_add(*args, **kwargs):
        raise RuntimeError("membership write failed")

    monkeypatch.setattr(projects.directory, "add", broken_add)

    with pytest.raises(RuntimeError):
        projects.create("Apollo", None, alice.id)

    assert store.projects.count() == 0
    assert store.members.count() == 0


def test_list_returns_projects_with_role(projects, store, project, alice, bob):
    other = projects.create("Gemini", None, bob.id)
    projects.add_member(other.id, alice.id, Role.member, bob.id)

    listed = projects.list(alice.id)

    assert [(p["project"].id, p["role"]) for p in listed] == [
        (project.id, Role.admin),
        (other.id, Role.member),
    ]


def test_get_requires_view_access(projects, project, alice, bob):
    with pytest.raises(ForbiddenError):
        projects.get(project.id, bob.id)

    projects.add_member(project.id, bob.id, Role.member, alice.id)
    detail = projects.get(project.id, bob.id)

    assert detail["project"].id == project.id
    assert {m["user"].username for m in detail["members"]} == {"alice", "bob"}
    for member in detail["members"]:
        assert "password_hash" not in member["user"].model_dump()


def test_get_unknown_project(projects, alice):
    with pytest.raises(NotFoundError):
        projects.get("missing", alice.id)


def test_update_by_creator(projects, project, alice):
    updated = projects.update(project.id, {"name": " Artemis ", "description": None}, alice.id)

    assert updated.name == "Artemis"
    assert updated.description == "Moon launch"


def test_update_rejects_non_creator_even_as_admin(projects, project, alice, bob):
    projects.add_member(project.id, bob.id, Role.admin, alice.id)

    with pytest.raises(ForbiddenError):
        projects.update(project.id, {"name": "Hijacked"}, bob.id)

    assert projects.find(project.id).name == "Apollo"


def test_rename_onto_existing_name_conflicts(projects, project, alice):
    projects.create("Gemini", None, alice.id)

    with pytest.raises(ConflictError):
        projects.update(project.id, {"name": "Gemini"}, alice.id)

    # Keeping its own name is not a conflict
    assert projects.update(project.id, {"name": "Apollo"}, alice.id).name == "Apollo"


def test_add_member_errors(projects, project, alice, bob):
    with pytest.raises(NotFoundError):
        projects.add_member(project.id, "missing-user", Role.member, alice.id)
    with pytest.raises(ForbiddenError):
        projects.add_member(project.id, bob.id, Role.member, bob.id)

    projects.add_member(project.id, bob.id, Role.member, alice.id)
    with pytest.raises(ConflictError):
        projects.add_member(project.id, bob.id, Role.admin, alice.id)


def test_remove_member(projects, directory, project, alice, bob):
    membership = projects.add_member(project.id, bob.id, Role.member, alice.id)

    with pytest.raises(ForbiddenError):
        projects.remove_member(project.id, membership.id, bob.id)

    assert projects.remove_member(project.id, membership.id, alice.id) is True
    assert not directory.is_member(bob.id, project.id)
    assert projects.remove_member(project.id, membership.id, alice.id) is False


def test_delete_cascades_everything(projects, tasks, notes, store, project, alice, bob):
    projects.add_member(project.id, bob.id, Role.member, alice.id)
    task = tasks.create("Build rocket", None, project.id, bob.id, alice.id)
    tasks.create_subtask(task.id, "Order fuel", alice.id)
    tasks.create_subtask(task.id, "Paint fins", bob.id)
    notes.create("Launch window is Friday", project.id, bob.id)

    survivor = projects.create("Gemini", None, alice.id)
    survivor_task = tasks.create("Keep me", None, survivor.id, alice.id, alice.id)

    with pytest.raises(ForbiddenError):
        projects.delete(project.id, bob.id)

    projects.delete(project.id, alice.id)

    assert store.projects.find_by_id(project.id) is None
    assert store.members.count(project_id=project.id) == 0
    assert store.tasks.count(project_id=project.id) == 0
    assert store.subtasks.count(task_id=task.id) == 0
    assert store.notes.count(project_id=project.id) == 0
    assert store.tasks.find_by_id(survivor_task.id) is not None

    with pytest.raises(NotFoundError):
        projects.delete(project.id, alice.id)
