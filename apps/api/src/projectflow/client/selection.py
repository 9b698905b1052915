from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from projectflow.core.config import settings

CURRENT_WORKSPACE_KEY = "currentWorkspaceId"


class MemoryStorage:
    """String key/value storage that lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class LocalStorage(MemoryStorage):
    """
    Durable string key/value storage backed by one JSON file, so the
    selected workspace survives a restart. Written through on every set.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(os.path.expanduser(str(path or settings.CLIENT_STATE_PATH)))
        self._lock = threading.Lock()
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            # unreadable state is treated as empty and overwritten on next write
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            super().set_item(key, value)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(self._items, indent=2, sort_keys=True), encoding="utf-8")
            tmp.replace(self.path)


Storage = MemoryStorage


def read_selected_workspace_id(storage: Storage) -> Optional[str]:
    return storage.get_item(CURRENT_WORKSPACE_KEY)


def persist_selected_workspace_id(storage: Storage, workspace_id: Optional[str]) -> None:
    storage.set_item(CURRENT_WORKSPACE_KEY, workspace_id or "")
