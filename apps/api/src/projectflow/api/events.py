from __future__ import annotations

import hmac

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from projectflow.core.config import settings
from projectflow.db.session import get_db
from projectflow.events.identity import registry
from projectflow.schemas.events import EventAckOut, EventIn

router = APIRouter(prefix="/api/events", tags=["events"])

EVENTS_KEY_HEADER = "X-Events-Key"


def _check_events_key(request: Request) -> None:
    expected = settings.EVENTS_SIGNING_KEY
    if not expected:
        return

    received = request.headers.get(EVENTS_KEY_HEADER, "")
    if not hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Invalid events key")


@router.get("")
def list_events(request: Request):
    _check_events_key(request)
    return {"events": registry.names()}


@router.post("", response_model=EventAckOut)
def receive_event(payload: EventIn, request: Request, db: Session = Depends(get_db)):
    _check_events_key(request)

    if registry.get(payload.name) is None:
        raise HTTPException(status_code=404, detail="No handler for event")

    try:
        registry.dispatch(db, payload.name, payload.data)
    except Exception as e:
        # already logged by the registry; a 5xx tells the sender delivery failed
        raise HTTPException(status_code=500, detail="Event handler failed") from e

    return EventAckOut(ok=True, event=payload.name)
