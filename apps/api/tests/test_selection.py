from __future__ import annotations

import json

from projectflow.client.gateway import WorkspaceGateway
from projectflow.client.selection import (
    CURRENT_WORKSPACE_KEY,
    LocalStorage,
    MemoryStorage,
    persist_selected_workspace_id,
    read_selected_workspace_id,
)
from projectflow.client.store import WorkspaceStore


def test_local_storage_survives_reload(tmp_path):
    path = tmp_path / "state" / "local_storage.json"

    persist_selected_workspace_id(LocalStorage(path), "w2")

    assert json.loads(path.read_text())[CURRENT_WORKSPACE_KEY] == "w2"
    assert read_selected_workspace_id(LocalStorage(path)) == "w2"


def test_local_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text("{not json")

    storage = LocalStorage(path)
    assert read_selected_workspace_id(storage) is None

    persist_selected_workspace_id(storage, "w1")
    assert read_selected_workspace_id(LocalStorage(path)) == "w1"


def test_persisting_none_stores_empty_string():
    storage = MemoryStorage()
    persist_selected_workspace_id(storage, None)
    assert storage.get_item(CURRENT_WORKSPACE_KEY) == ""


def test_store_selection_survives_restart(tmp_path):
    path = tmp_path / "local_storage.json"

    class Gateway(WorkspaceGateway):
        def fetch_workspaces(self, token):
            return [{"id": "w1"}, {"id": "w2"}]

    first = WorkspaceStore(gateway=Gateway(base_url="http://api.test"), storage=LocalStorage(path))
    first.fetch_workspaces("tok")
    first.set_current_workspace("w2")

    second = WorkspaceStore(gateway=Gateway(base_url="http://api.test"), storage=LocalStorage(path))
    state = second.fetch_workspaces("tok")

    assert state.current_workspace["id"] == "w2"
