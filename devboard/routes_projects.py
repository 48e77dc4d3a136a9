"""
devboard/routes_projects.py

Project endpoints. All require authentication; update, delete and member
administration are restricted to the project creator (enforced in
ProjectRegistry through devboard.authz).
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path

from devboard.auth_context import AuthContext, require_auth_context
from devboard.dependencies import get_project_registry
from devboard.models import Membership, Project
from devboard.projects import ProjectRegistry
from devboard.schemas import (
    AddMemberRequest,
    MessageResponse,
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectUpdateRequest,
    ProjectWithRole,
)

router = APIRouter(
    prefix="/api/v1/projects",
    tags=["projects"],
)


@router.post("", response_model=Project, status_code=201)
def create_project(
    req: ProjectCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    return projects.create(req.name, req.description, ctx.user_id)


@router.get("", response_model=List[ProjectWithRole])
def list_projects(
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    return projects.list(ctx.user_id)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
def get_project(
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    return projects.get(project_id, ctx.user_id)


@router.put("/{project_id}", response_model=Project)
def update_project(
    req: ProjectUpdateRequest,
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    return projects.update(project_id, req.model_dump(exclude_unset=True), ctx.user_id)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    projects.delete(project_id, ctx.user_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/members", response_model=Membership, status_code=201)
def add_member(
    req: AddMemberRequest,
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    return projects.add_member(project_id, req.user_id, req.role, ctx.user_id)


@router.delete("/{project_id}/members/{member_id}", response_model=MessageResponse)
def remove_member(
    project_id: str = Path(..., description="Project ID"),
    member_id: str = Path(..., description="Membership ID"),
    ctx: AuthContext = Depends(require_auth_context),
    projects: ProjectRegistry = Depends(get_project_registry),
):
    projects.remove_member(project_id, member_id, ctx.user_id)
    return MessageResponse(message="Member removed successfully")
