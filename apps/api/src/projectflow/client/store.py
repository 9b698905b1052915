from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

import structlog

from projectflow.client.actions import (
    Action,
    AddProject,
    AddTask,
    AddWorkspace,
    DeleteTask,
    DeleteWorkspace,
    FetchWorkspacesFulfilled,
    FetchWorkspacesPending,
    FetchWorkspacesRejected,
    Record,
    SetCurrentWorkspace,
    SetWorkspaces,
    UpdateTask,
    UpdateWorkspace,
)
from projectflow.client.gateway import WorkspaceGateway, WorkspaceGatewayError
from projectflow.client.selection import (
    LocalStorage,
    Storage,
    persist_selected_workspace_id,
    read_selected_workspace_id,
)

log = structlog.get_logger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch workspaces"


@dataclass(frozen=True)
class WorkspaceState:
    workspaces: List[Record] = field(default_factory=list)
    current_workspace: Optional[Record] = None
    loading: bool = False
    error: Optional[str] = None
    # id of the latest dispatched fetch; older responses are dropped
    request_id: Optional[str] = None


# -------------------------
# Normalization
# -------------------------
def _records(value: Any) -> List[Record]:
    """Keep only the dict entries of a list; anything else reads as empty."""
    if not isinstance(value, list):
        return []
    return [r for r in value if isinstance(r, dict)]


def _normalize_project(project: Record) -> Record:
    return {**project, "tasks": _records(project.get("tasks"))}


def _normalize_workspace(workspace: Record) -> Record:
    return {**workspace, "projects": [_normalize_project(p) for p in _records(workspace.get("projects"))]}


def _find(records: Sequence[Record], record_id: Any) -> int:
    for index, record in enumerate(records):
        if record.get("id") == record_id:
            return index
    return -1


# -------------------------
# Nested copy-on-write updates
# -------------------------
Transform = Callable[[Record], Record]


def _update_workspace(state: WorkspaceState, workspace_id: Any, transform: Transform) -> WorkspaceState:
    """
    Apply `transform` to one workspace and mirror it into current_workspace.
    A transform returning its input unchanged means "no match below"; the state is then returned as is.
    """
    index = _find(state.workspaces, workspace_id)
    if index < 0:
        return state

    old = state.workspaces[index]
    new = transform(old)
    if new is old:
        return state

    workspaces = list(state.workspaces)
    workspaces[index] = new

    current = state.current_workspace
    if current is old:
        current = new
    elif current is not None and current.get("id") == workspace_id:
        current = transform(current)

    return replace(state, workspaces=workspaces, current_workspace=current)


def _in_project(project_id: Any, transform: Transform) -> Transform:
    def apply(workspace: Record) -> Record:
        projects = workspace.get("projects") or []
        index = _find(projects, project_id)
        if index < 0:
            return workspace

        old = projects[index]
        new = transform(old)
        if new is old:
            return workspace

        projects = list(projects)
        projects[index] = new
        return {**workspace, "projects": projects}

    return apply


def _tasks(project: Record) -> List[Record]:
    return _records(project.get("tasks"))


# -------------------------
# Reducers
# -------------------------
Reducer = Callable[[WorkspaceState, Any, Storage], WorkspaceState]

_REDUCERS: Dict[Type[Any], Reducer] = {}


def _reducer(action_type: Type[Any]) -> Callable[[Reducer], Reducer]:
    def decorator(fn: Reducer) -> Reducer:
        _REDUCERS[action_type] = fn
        return fn

    return decorator


def reduce(state: WorkspaceState, action: Action, storage: Storage) -> WorkspaceState:
    handler = _REDUCERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown workspace action: {type(action).__name__}")
    return handler(state, action, storage)


@_reducer(SetWorkspaces)
def _set_workspaces(state: WorkspaceState, action: SetWorkspaces, storage: Storage) -> WorkspaceState:
    workspaces = [_normalize_workspace(w) for w in _records(action.workspaces)]

    # keep the selection only if it survived the replacement
    current = None
    if state.current_workspace is not None:
        index = _find(workspaces, state.current_workspace.get("id"))
        current = workspaces[index] if index >= 0 else None

    return replace(state, workspaces=workspaces, current_workspace=current)


@_reducer(SetCurrentWorkspace)
def _set_current_workspace(state: WorkspaceState, action: SetCurrentWorkspace, storage: Storage) -> WorkspaceState:
    persist_selected_workspace_id(storage, action.workspace_id)
    index = _find(state.workspaces, action.workspace_id)
    current = state.workspaces[index] if index >= 0 else None
    return replace(state, current_workspace=current)


@_reducer(AddWorkspace)
def _add_workspace(state: WorkspaceState, action: AddWorkspace, storage: Storage) -> WorkspaceState:
    if not isinstance(action.workspace, dict):
        return state
    workspace = _normalize_workspace(action.workspace)
    current = state.current_workspace
    if current is None:
        current = workspace
        persist_selected_workspace_id(storage, workspace.get("id"))
    return replace(state, workspaces=[*state.workspaces, workspace], current_workspace=current)


@_reducer(UpdateWorkspace)
def _update_workspace_fields(state: WorkspaceState, action: UpdateWorkspace, storage: Storage) -> WorkspaceState:
    if not isinstance(action.patch, dict):
        return state
    workspace_id = action.patch.get("id")
    return _update_workspace(state, workspace_id, lambda w: _normalize_workspace({**w, **action.patch}))


@_reducer(DeleteWorkspace)
def _delete_workspace(state: WorkspaceState, action: DeleteWorkspace, storage: Storage) -> WorkspaceState:
    if _find(state.workspaces, action.workspace_id) < 0:
        return state

    remaining = [w for w in state.workspaces if w.get("id") != action.workspace_id]
    current = state.current_workspace
    if current is not None and current.get("id") == action.workspace_id:
        current = remaining[0] if remaining else None
        persist_selected_workspace_id(storage, current.get("id") if current else "")

    return replace(state, workspaces=remaining, current_workspace=current)


@_reducer(AddProject)
def _add_project(state: WorkspaceState, action: AddProject, storage: Storage) -> WorkspaceState:
    if not isinstance(action.project, dict):
        return state
    project = _normalize_project(action.project)
    return _update_workspace(
        state,
        action.workspace_id,
        lambda w: {**w, "projects": [*(w.get("projects") or []), project]},
    )


@_reducer(AddTask)
def _add_task(state: WorkspaceState, action: AddTask, storage: Storage) -> WorkspaceState:
    if not isinstance(action.task, dict):
        return state
    task = dict(action.task)
    return _update_workspace(
        state,
        action.workspace_id,
        _in_project(action.project_id, lambda p: {**p, "tasks": [*_tasks(p), task]}),
    )


@_reducer(UpdateTask)
def _update_task(state: WorkspaceState, action: UpdateTask, storage: Storage) -> WorkspaceState:
    if not isinstance(action.task, dict):
        return state
    task = dict(action.task)

    def replace_task(project: Record) -> Record:
        tasks = _tasks(project)
        index = _find(tasks, task.get("id"))
        if index < 0:
            return project
        tasks = list(tasks)
        tasks[index] = task
        return {**project, "tasks": tasks}

    return _update_workspace(state, action.workspace_id, _in_project(action.project_id, replace_task))


@_reducer(DeleteTask)
def _delete_task(state: WorkspaceState, action: DeleteTask, storage: Storage) -> WorkspaceState:
    ids = set(action.ids())

    def drop_tasks(project: Record) -> Record:
        tasks = _tasks(project)
        kept = [t for t in tasks if t.get("id") not in ids]
        if len(kept) == len(tasks):
            return project
        return {**project, "tasks": kept}

    return _update_workspace(state, action.workspace_id, _in_project(action.project_id, drop_tasks))


@_reducer(FetchWorkspacesPending)
def _fetch_pending(state: WorkspaceState, action: FetchWorkspacesPending, storage: Storage) -> WorkspaceState:
    return replace(state, loading=True, error=None, request_id=action.request_id)


@_reducer(FetchWorkspacesFulfilled)
def _fetch_fulfilled(state: WorkspaceState, action: FetchWorkspacesFulfilled, storage: Storage) -> WorkspaceState:
    if action.request_id != state.request_id:
        return state

    workspaces = [_normalize_workspace(w) for w in _records(action.workspaces)]

    current = None
    if workspaces:
        saved_id = read_selected_workspace_id(storage)
        index = _find(workspaces, saved_id) if saved_id else -1
        current = workspaces[index] if index >= 0 else workspaces[0]
        persist_selected_workspace_id(storage, current.get("id"))

    return replace(
        state,
        workspaces=workspaces,
        current_workspace=current,
        loading=False,
        error=None,
        request_id=None,
    )


@_reducer(FetchWorkspacesRejected)
def _fetch_rejected(state: WorkspaceState, action: FetchWorkspacesRejected, storage: Storage) -> WorkspaceState:
    if action.request_id != state.request_id:
        return state
    return replace(state, loading=False, error=action.message or FETCH_FAILED_MESSAGE, request_id=None)


# -------------------------
# Store
# -------------------------
Listener = Callable[[WorkspaceState], None]


class WorkspaceStore:
    """
    Owns the client-side workspace mirror. Every change goes through
    dispatch(), one action and one state transition at a time.
    """

    def __init__(
        self,
        *,
        gateway: Optional[WorkspaceGateway] = None,
        storage: Optional[Storage] = None,
        state: Optional[WorkspaceState] = None,
    ):
        self.gateway = gateway or WorkspaceGateway()
        self.storage = storage if storage is not None else LocalStorage()
        self._state = state or WorkspaceState()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> WorkspaceState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> WorkspaceState:
        with self._lock:
            previous = self._state
            self._state = reduce(previous, action, self.storage)
            current = self._state

        if current is not previous:
            for listener in list(self._listeners):
                listener(current)
        return current

    # -------- fetch --------
    def fetch_workspaces(self, token: Optional[str]) -> WorkspaceState:
        request_id = uuid.uuid4().hex
        self.dispatch(FetchWorkspacesPending(request_id=request_id))
        log.info("fetch_workspaces_started", request_id=request_id)

        try:
            workspaces = self.gateway.fetch_workspaces(token)
            return self.dispatch(FetchWorkspacesFulfilled(request_id=request_id, workspaces=workspaces))
        except WorkspaceGatewayError as e:
            log.warning("fetch_workspaces_rejected", request_id=request_id, status_code=e.status_code, error=e.message)
            return self.dispatch(FetchWorkspacesRejected(request_id=request_id, message=e.message))
        except Exception:
            # the fetch must always settle, never stay loading
            log.exception("fetch_workspaces_failed", request_id=request_id)
            return self.dispatch(FetchWorkspacesRejected(request_id=request_id, message=None))

    # -------- local mutations --------
    def set_workspaces(self, workspaces: Any) -> WorkspaceState:
        return self.dispatch(SetWorkspaces(workspaces=workspaces))

    def set_current_workspace(self, workspace_id: str) -> WorkspaceState:
        return self.dispatch(SetCurrentWorkspace(workspace_id=workspace_id))

    def add_workspace(self, workspace: Record) -> WorkspaceState:
        return self.dispatch(AddWorkspace(workspace=workspace))

    def update_workspace(self, patch: Record) -> WorkspaceState:
        return self.dispatch(UpdateWorkspace(patch=patch))

    def delete_workspace(self, workspace_id: str) -> WorkspaceState:
        return self.dispatch(DeleteWorkspace(workspace_id=workspace_id))

    def add_project(self, workspace_id: str, project: Record) -> WorkspaceState:
        return self.dispatch(AddProject(workspace_id=workspace_id, project=project))

    def add_task(self, workspace_id: str, project_id: str, task: Record) -> WorkspaceState:
        return self.dispatch(AddTask(workspace_id=workspace_id, project_id=project_id, task=task))

    def update_task(self, workspace_id: str, project_id: str, task: Record) -> WorkspaceState:
        return self.dispatch(UpdateTask(workspace_id=workspace_id, project_id=project_id, task=task))

    def delete_task(
        self, workspace_id: str, project_id: str, task_ids: Union[str, Sequence[str]]
    ) -> WorkspaceState:
        return self.dispatch(DeleteTask(workspace_id=workspace_id, project_id=project_id, task_ids=task_ids))
