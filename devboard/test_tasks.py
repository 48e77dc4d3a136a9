"""
devboard/test_tasks.py

Task ledger: assignment rules, assigner-only writes, subtasks.
"""

import pytest

from devboard.authz import AccessPolicy
from devboard.errors import ForbiddenError, InvalidAssignmentError, NotFoundError, ValidationError
from devboard.models import Role, TaskStatus
from devboard.tasks import TaskLedger


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def project(projects, alice, bob):
    project = projects.create("Apollo", None, alice.id)
    projects.add_member(project.id, bob.id, Role.member, alice.id)
    return project


@pytest.fixture
def task(tasks, project, alice, bob):
    return tasks.create(" Build rocket ", "Stage one", project.id, bob.id, alice.id)


# ============================================================================
# Creation
# ============================================================================

def test_create_task(task, project, alice, bob):
    assert task.title == "Build rocket"
    assert task.status == TaskStatus.todo
    assert task.assigned_by == alice.id
    assert task.assigned_to == bob.id
    assert task.project_id == project.id


def test_create_requires_project_creator(tasks, project, bob):
    with pytest.raises(ForbiddenError):
        tasks.create("Sneaky", None, project.id, bob.id, bob.id)


def test_create_rejects_non_member_assignee(tasks, store, project, alice, carol):
    with pytest.raises(InvalidAssignmentError):
        tasks.create("Outsourced", None, project.id, carol.id, alice.id)

    assert store.tasks.count(project_id=project.id) == 0


def test_create_unknown_project(tasks, alice):
    with pytest.raises(NotFoundError):
        tasks.create("Orphan", None, "missing", alice.id, alice.id)


# ============================================================================
# Reads
# ============================================================================

def test_get_includes_profiles_and_subtasks(tasks, task, alice, bob):
    tasks.create_subtask(task.id, "Order fuel", bob.id)

    detail = tasks.get(task.id)

    assert detail["task"].id == task.id
    assert detail["project_name"] == "Apollo"
    assert detail["assigned_to_user"].id == bob.id
    assert detail["assigned_by_user"].id == alice.id
    assert [s.title for s in detail["subtasks"]] == ["Order fuel"]


def test_list_by_project_and_by_caller(tasks, projects, task, alice, bob, carol):
    other = projects.create("Gemini", None, carol.id)
    tasks.create("Unrelated", None, other.id, carol.id, carol.id)

    assert [t["task"].id for t in tasks.list(bob.id, project_id=task.project_id)] == [task.id]
    assert [t["task"].id for t in tasks.list(bob.id)] == [task.id]
    assert [t["task"].id for t in tasks.list(alice.id)] == [task.id]


def test_list_by_project_open_by_default(tasks, task, carol):
    assert len(tasks.list(carol.id, project_id=task.project_id)) == 1


def test_list_by_project_members_only_policy(store, directory, task, carol, bob):
    ledger = TaskLedger(store, directory, AccessPolicy(task_list_members_only=True))

    with pytest.raises(ForbiddenError):
        ledger.list(carol.id, project_id=task.project_id)
    assert len(ledger.list(bob.id, project_id=task.project_id)) == 1


# ============================================================================
# Update / delete
# ============================================================================

def test_update_by_assigner(tasks, task, alice):
    updated = tasks.update(task.id, {"status": "in_progress", "title": "Build bigger rocket"}, alice.id)

    assert updated.status == TaskStatus.in_progress
    assert updated.title == "Build bigger rocket"


def test_update_by_assignee_is_forbidden_and_changes_nothing(tasks, store, task, bob):
    before = store.tasks.find_by_id(task.id)

    with pytest.raises(ForbiddenError):
        tasks.update(task.id, {"status": "done"}, bob.id)

    assert store.tasks.find_by_id(task.id) == before


def test_update_rejects_unknown_status(tasks, task, alice):
    with pytest.raises(ValidationError):
        tasks.update(task.id, {"status": "archived"}, alice.id)


def test_reassignment_requires_membership(tasks, task, alice, carol):
    with pytest.raises(InvalidAssignmentError):
        tasks.update(task.id, {"assigned_to_id": carol.id}, alice.id)

    updated = tasks.update(task.id, {"assigned_to_id": alice.id}, alice.id)
    assert updated.assigned_to == alice.id


def test_delete_by_assignee_is_forbidden(tasks, store, task, bob):
    tasks.create_subtask(task.id, "Order fuel", bob.id)

    with pytest.raises(ForbiddenError):
        tasks.delete(task.id, bob.id)

    assert store.tasks.find_by_id(task.id) is not None
    assert store.subtasks.count(task_id=task.id) == 1


def test_delete_cascades_subtasks(tasks, store, task, alice, bob):
    tasks.create_subtask(task.id, "Order fuel", bob.id)
    tasks.create_subtask(task.id, "Paint fins", alice.id)

    tasks.delete(task.id, alice.id)

    assert store.tasks.find_by_id(task.id) is None
    assert store.subtasks.count(task_id=task.id) == 0
    with pytest.raises(NotFoundError):
        tasks.get(task.id)


# ============================================================================
# Subtasks
# ============================================================================

def test_subtask_lifecycle(tasks, task, bob):
    subtask = tasks.create_subtask(task.id, "Order fuel", bob.id)
    assert subtask.is_completed is False
    assert subtask.created_by == bob.id

    done = tasks.update_subtask(task.id, subtask.id, {"is_completed": True})
    assert done.is_completed is True
    assert done.title == "Order fuel"

    tasks.delete_subtask(subtask.id)
    with pytest.raises(NotFoundError):
        tasks.delete_subtask(subtask.id)


def test_subtask_on_missing_task(tasks, bob):
    with pytest.raises(NotFoundError):
        tasks.create_subtask("missing", "Nope", bob.id)


def test_update_subtask_is_scoped_to_its_task(tasks, project, task, alice, bob):
    other = tasks.create("Other", None, project.id, bob.id, alice.id)
    subtask = tasks.create_subtask(task.id, "Order fuel", bob.id)

    with pytest.raises(NotFoundError):
        tasks.update_subtask(other.id, subtask.id, {"is_completed": True})
