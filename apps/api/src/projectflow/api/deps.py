from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from projectflow.core.security import get_user_id_from_request
from projectflow.db.models import WorkspaceMember

VALID_ROLES = {"ADMIN", "MEMBER"}


def require_user_id(request: Request) -> str:
    user_id = get_user_id_from_request(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def get_workspace_role(db: Session, workspace_id: str, user_id: str) -> str | None:
    role = db.execute(
        select(WorkspaceMember.role).where(
            WorkspaceMember.workspace_id == workspace_id,
            WorkspaceMember.user_id == user_id,
        )
    ).scalar_one_or_none()

    return str(role) if role else None
