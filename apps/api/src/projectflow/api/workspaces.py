from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from projectflow.api.deps import VALID_ROLES, get_workspace_role, require_user_id
from projectflow.db.session import get_db
from projectflow.db.models import Comment, Project, ProjectMember, Task, User, Workspace, WorkspaceMember
from projectflow.schemas.workspaces import (
    AddMemberIn,
    AddMemberOut,
    WorkspaceListOut,
    WorkspaceMemberOut,
    WorkspaceOut,
)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])

log = structlog.get_logger(__name__)


@router.get("", response_model=WorkspaceListOut)
def list_workspaces(db: Session = Depends(get_db), user_id: str = Depends(require_user_id)):
    # every workspace the caller is a member of, with the whole tree the client mirrors
    project_tasks = selectinload(Workspace.projects).selectinload(Project.tasks)
    q = (
        select(Workspace)
        .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
        .where(WorkspaceMember.user_id == user_id)
        .options(
            selectinload(Workspace.owner),
            selectinload(Workspace.members).selectinload(WorkspaceMember.user),
            selectinload(Workspace.projects).selectinload(Project.members).selectinload(ProjectMember.user),
            project_tasks.selectinload(Task.assignee),
            project_tasks.selectinload(Task.comments).selectinload(Comment.user),
        )
        .order_by(Workspace.created_at.asc(), Workspace.id.asc())
    )
    rows = db.execute(q).scalars().unique().all()
    return WorkspaceListOut(workspaces=[WorkspaceOut.model_validate(w) for w in rows])


@router.post("/add-member", response_model=AddMemberOut)
def add_member(payload: AddMemberIn, db: Session = Depends(get_db), user_id: str = Depends(require_user_id)):
    email = (payload.email or "").strip().lower()
    workspace_id = (payload.workspace_id or "").strip()
    role = (payload.role or "").strip()

    if not email or not workspace_id or not role:
        raise HTTPException(status_code=400, detail="email, workspaceId and role are required")

    if role not in VALID_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role specified")

    target_user = db.execute(select(User).where(func.lower(User.email) == email)).scalar_one_or_none()
    if not target_user:
        raise HTTPException(status_code=404, detail="User not found")

    ws = db.get(Workspace, workspace_id)
    if not ws:
        raise HTTPException(status_code=404, detail="Workspace not found")

    if get_workspace_role(db, ws.id, user_id) != "ADMIN":
        raise HTTPException(status_code=403, detail="Only ADMINs can add members to the workspace")

    existing = db.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.workspace_id == ws.id,
            WorkspaceMember.user_id == target_user.id,
        )
    ).scalar_one_or_none()

    if existing:
        raise HTTPException(status_code=400, detail="User is already a member of the workspace")

    wm = WorkspaceMember(
        workspace_id=ws.id,
        user_id=target_user.id,
        role=role,
        message=payload.message or None,
    )
    db.add(wm)
    db.commit()
    db.refresh(wm)

    log.info("workspace_member_added", workspace_id=ws.id, user_id=target_user.id, role=role, added_by=user_id)

    return AddMemberOut(member=WorkspaceMemberOut.model_validate(wm), message="Member added successfully")
