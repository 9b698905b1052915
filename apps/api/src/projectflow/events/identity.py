from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from projectflow.db.models import User, Workspace, WorkspaceMember
from projectflow.events.registry import EventRegistry
from projectflow.schemas.events import (
    DeletedObjectData,
    OrganizationData,
    OrganizationMembershipData,
    UserData,
)

registry = EventRegistry()


# -------------------------
# Users
# -------------------------
@registry.on("clerk/user.created")
def sync_user_creation(db: Session, data: Dict[str, Any]) -> None:
    payload = UserData.model_validate(data)
    db.add(
        User(
            id=payload.id,
            name=payload.display_name(),
            email=payload.primary_email(),
            image=payload.image_url or "",
        )
    )
    db.commit()


@registry.on("clerk/user.updated")
def sync_user_update(db: Session, data: Dict[str, Any]) -> None:
    payload = UserData.model_validate(data)
    user = db.execute(select(User).where(User.id == payload.id)).scalar_one()
    user.name = payload.display_name()
    user.email = payload.primary_email()
    user.image = payload.image_url or ""
    db.commit()


@registry.on("clerk/user.deleted")
def sync_user_deletion(db: Session, data: Dict[str, Any]) -> None:
    payload = DeletedObjectData.model_validate(data)
    user = db.execute(select(User).where(User.id == payload.id)).scalar_one()
    db.delete(user)
    db.commit()


# -------------------------
# Organizations (workspaces)
# -------------------------
@registry.on("clerk/organization.created")
def sync_workspace_creation(db: Session, data: Dict[str, Any]) -> None:
    payload = OrganizationData.model_validate(data)
    if not payload.created_by:
        raise ValueError(f"Organization {payload.id} has no creator")

    db.add(
        Workspace(
            id=payload.id,
            name=payload.name,
            slug=payload.slug or payload.id,
            owner_id=payload.created_by,
            image_url=payload.image_url or "",
        )
    )
    db.flush()

    # creator administers the workspace
    db.add(WorkspaceMember(user_id=payload.created_by, workspace_id=payload.id, role="ADMIN"))
    db.commit()


@registry.on("clerk/organization.updated")
def sync_workspace_update(db: Session, data: Dict[str, Any]) -> None:
    payload = OrganizationData.model_validate(data)
    ws = db.execute(select(Workspace).where(Workspace.id == payload.id)).scalar_one()
    ws.name = payload.name
    ws.slug = payload.slug or ws.slug
    ws.image_url = payload.image_url or ""
    db.commit()


@registry.on("clerk/organization.deleted")
def sync_workspace_deletion(db: Session, data: Dict[str, Any]) -> None:
    payload = DeletedObjectData.model_validate(data)
    ws = db.execute(select(Workspace).where(Workspace.id == payload.id)).scalar_one()
    db.delete(ws)
    db.commit()


@registry.on("clerk/organization_member.created")
def sync_workspace_member_creation(db: Session, data: Dict[str, Any]) -> None:
    payload = OrganizationMembershipData.model_validate(data)
    db.add(
        WorkspaceMember(
            user_id=payload.public_user_data.user_id,
            workspace_id=payload.organization.id,
            role=payload.normalized_role(),
        )
    )
    db.commit()
