"""
devboard/routes_tasks.py

Task and subtask endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from devboard.auth_context import AuthContext, require_auth_context
from devboard.dependencies import get_task_ledger
from devboard.models import Subtask, Task
from devboard.schemas import (
    MessageResponse,
    SubtaskCreateRequest,
    SubtaskUpdateRequest,
    TaskCreateRequest,
    TaskDetailResponse,
    TaskUpdateRequest,
    TaskView,
)
from devboard.tasks import TaskLedger

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


@router.post("", response_model=Task, status_code=201)
def create_task(
    req: TaskCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.create(req.title, req.description, req.project_id, req.assigned_to_id, ctx.user_id)


@router.get("", response_model=List[TaskView])
def list_tasks(
    project_id: Optional[str] = Query(None, min_length=1, description="Only tasks of this project"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.list(ctx.user_id, project_id)


# Registered before /{task_id} so "subtasks" is never captured as a task id
@router.delete("/subtasks/{subtask_id}", response_model=MessageResponse)
def delete_subtask(
    subtask_id: str = Path(..., description="Subtask ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    tasks.delete_subtask(subtask_id)
    return MessageResponse(message="Subtask deleted successfully")


@router.get("/{task_id}", response_model=TaskDetailResponse)
def get_task(
    task_id: str = Path(..., description="Task ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.get(task_id)


@router.put("/{task_id}", response_model=Task)
def update_task(
    req: TaskUpdateRequest,
    task_id: str = Path(..., description="Task ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.update(task_id, req.model_dump(exclude_unset=True), ctx.user_id)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str = Path(..., description="Task ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    tasks.delete(task_id, ctx.user_id)
    return MessageResponse(message="Task deleted successfully")


@router.post("/{task_id}/subtasks", response_model=Subtask, status_code=201)
def create_subtask(
    req: SubtaskCreateRequest,
    task_id: str = Path(..., description="Task ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.create_subtask(task_id, req.title, ctx.user_id)


@router.put("/{task_id}/subtasks/{subtask_id}", response_model=Subtask)
def update_subtask(
    req: SubtaskUpdateRequest,
    task_id: str = Path(..., description="Task ID"),
    subtask_id: str = Path(..., description="Subtask ID"),
    ctx: AuthContext = Depends(require_auth_context),
    tasks: TaskLedger = Depends(get_task_ledger),
):
    return tasks.update_subtask(task_id, subtask_id, req.model_dump(exclude_unset=True))
