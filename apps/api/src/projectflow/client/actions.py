from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

Record = Dict[str, Any]


# -------- Local mutations --------
@dataclass(frozen=True)
class SetWorkspaces:
    workspaces: Any


@dataclass(frozen=True)
class SetCurrentWorkspace:
    workspace_id: str


@dataclass(frozen=True)
class AddWorkspace:
    workspace: Record


@dataclass(frozen=True)
class UpdateWorkspace:
    patch: Record  # must carry "id"


@dataclass(frozen=True)
class DeleteWorkspace:
    workspace_id: str


@dataclass(frozen=True)
class AddProject:
    workspace_id: str
    project: Record


@dataclass(frozen=True)
class AddTask:
    workspace_id: str
    project_id: str
    task: Record


@dataclass(frozen=True)
class UpdateTask:
    workspace_id: str
    project_id: str
    task: Record  # replaces the task with the same "id"


@dataclass(frozen=True)
class DeleteTask:
    workspace_id: str
    project_id: str
    task_ids: Union[str, Sequence[str]]

    def ids(self) -> List[str]:
        if isinstance(self.task_ids, str):
            return [self.task_ids]
        return list(self.task_ids)


# -------- Fetch lifecycle --------
@dataclass(frozen=True)
class FetchWorkspacesPending:
    request_id: str


@dataclass(frozen=True)
class FetchWorkspacesFulfilled:
    request_id: str
    workspaces: List[Record] = field(default_factory=list)


@dataclass(frozen=True)
class FetchWorkspacesRejected:
    request_id: str
    message: Optional[str] = None


Action = Union[
    SetWorkspaces,
    SetCurrentWorkspace,
    AddWorkspace,
    UpdateWorkspace,
    DeleteWorkspace,
    AddProject,
    AddTask,
    UpdateTask,
    DeleteTask,
    FetchWorkspacesPending,
    FetchWorkspacesFulfilled,
    FetchWorkspacesRejected,
]
