from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from projectflow.db.session import get_db

router = APIRouter(tags=["health"])

log = structlog.get_logger(__name__)


@router.get("/", response_class=PlainTextResponse)
def live():
    return "Server is Live!"


@router.get("/db-test")
def db_test(db: Session = Depends(get_db)):
    try:
        rows = db.execute(sql_text("SELECT 1 AS result")).mappings().all()
    except SQLAlchemyError as e:
        log.exception("db_test_failed")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Connection failed", "error": str(e)},
        )
    return {"status": "success", "message": "Connected to database", "data": [dict(r) for r in rows]}
