from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
import structlog

from projectflow.core.config import settings

log = structlog.get_logger(__name__)


class WorkspaceGatewayError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details or {}


class MissingCredentialError(WorkspaceGatewayError):
    def __init__(self) -> None:
        super().__init__(401, "No authentication token provided")


class UnexpectedShapeError(WorkspaceGatewayError):
    def __init__(self, payload: Any):
        super().__init__(
            200,
            f"Unexpected response shape. Expected array but got {type(payload).__name__}",
            details={"payload": payload},
        )


def _error_message(r: requests.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    # raw bodies (proxy HTML pages) are not surfaced as messages
    return r.reason or f"HTTP {r.status_code}"


def resolve_workspaces(payload: Any) -> List[Dict[str, Any]]:
    """
    The API answers either {"workspaces": [...]} or a bare list.
    Anything that does not resolve to a list is rejected.
    """
    if isinstance(payload, dict) and payload.get("workspaces") is not None:
        resolved = payload["workspaces"]
    elif payload is not None:
        resolved = payload
    else:
        resolved = []

    if not isinstance(resolved, list):
        raise UnexpectedShapeError(resolved)
    return resolved


class WorkspaceGateway:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.base = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.CLIENT_TIMEOUT_SECONDS

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    def fetch_workspaces(self, token: Optional[str]) -> List[Dict[str, Any]]:
        # one attempt, no retries
        if not token or not isinstance(token, str):
            log.warning("fetch_workspaces_aborted", reason="no token")
            raise MissingCredentialError()

        url = f"{self.base}/api/workspaces"
        try:
            r = requests.get(url, headers=self._headers(token), timeout=self.timeout)
        except requests.RequestException as e:
            raise WorkspaceGatewayError(0, str(e) or "Unknown error", details={"url": url}) from e

        if r.status_code >= 400:
            raise WorkspaceGatewayError(r.status_code, _error_message(r), details={"url": url})

        try:
            payload = r.json() if r.content else None
        except ValueError:
            payload = r.text
        return resolve_workspaces(payload)
