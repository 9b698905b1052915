from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """ORM-readable model serialized with camelCase keys, the shape the client mirrors."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -------- Users --------
class UserOut(CamelModel):
    id: str
    name: str
    email: str
    image: str = ""


# -------- Workspace members --------
class WorkspaceMemberOut(CamelModel):
    id: uuid.UUID
    user_id: str
    workspace_id: str
    role: str
    message: Optional[str] = None
    user: Optional[UserOut] = None


class AddMemberIn(CamelModel):
    # validated by hand so missing/invalid fields answer 400, not 422
    email: Optional[str] = None
    workspace_id: Optional[str] = None
    role: Optional[str] = None
    message: Optional[str] = None


class AddMemberOut(CamelModel):
    member: WorkspaceMemberOut
    message: str


# -------- Tasks --------
class CommentOut(CamelModel):
    id: uuid.UUID
    content: str
    user_id: str
    task_id: uuid.UUID
    created_at: Optional[datetime] = None
    user: Optional[UserOut] = None


class TaskOut(CamelModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: str
    type: str
    priority: str
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assignee: Optional[UserOut] = None
    comments: List[CommentOut] = Field(default_factory=list)


# -------- Projects --------
class ProjectMemberOut(CamelModel):
    id: uuid.UUID
    user_id: str
    project_id: uuid.UUID
    user: Optional[UserOut] = None


class ProjectOut(CamelModel):
    id: uuid.UUID
    workspace_id: str
    name: str
    description: Optional[str] = None
    priority: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    team_lead: Optional[str] = None
    progress: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    members: List[ProjectMemberOut] = Field(default_factory=list)
    tasks: List[TaskOut] = Field(default_factory=list)


# -------- Workspaces --------
class WorkspaceOut(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    owner_id: str
    image_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    members: List[WorkspaceMemberOut] = Field(default_factory=list)
    projects: List[ProjectOut] = Field(default_factory=list)
    owner: Optional[UserOut] = None


class WorkspaceListOut(CamelModel):
    workspaces: List[WorkspaceOut]
