from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

log = structlog.get_logger(__name__)

Handler = Callable[[Session, Dict[str, Any]], None]


class UnknownEventError(KeyError):
    pass


class EventRegistry:
    """
    Maps an exact event name to the one handler that mirrors it into the database.
    Handlers are independent and share no state; each gets the request's session.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def on(self, event_name: str) -> Callable[[Handler], Handler]:
        def decorator(fn: Handler) -> Handler:
            if event_name in self._handlers:
                raise ValueError(f"Handler already registered for {event_name}")
            self._handlers[event_name] = fn
            return fn

        return decorator

    def get(self, event_name: str) -> Optional[Handler]:
        return self._handlers.get(event_name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, db: Session, event_name: str, data: Dict[str, Any]) -> None:
        handler = self.get(event_name)
        if handler is None:
            raise UnknownEventError(event_name)

        try:
            handler(db, data)
        except Exception:
            # failed delivery: the event infrastructure decides whether to retry
            db.rollback()
            log.exception("event_handler_failed", event_name=event_name, handler=handler.__name__)
            raise

        log.info("event_handled", event_name=event_name, handler=handler.__name__)
