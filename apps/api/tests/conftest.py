"""Shared fixtures: an in-memory SQLite schema, the API app bound to it, and session tokens."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from projectflow.core.config import settings
from projectflow.db.base import Base
from projectflow.db.models import User, Workspace, WorkspaceMember
from projectflow.db.session import get_db
from projectflow.main import app

TEST_JWT_KEY = "test-secret"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def auth_settings(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_JWT_KEY", TEST_JWT_KEY)
    monkeypatch.setattr(settings, "CLERK_JWT_ALG", "HS256")
    monkeypatch.setattr(settings, "CLERK_ISSUER", "")
    monkeypatch.setattr(settings, "EVENTS_SIGNING_KEY", "")
    return settings


@pytest.fixture()
def client(engine, auth_settings):
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def _get_test_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, TEST_JWT_KEY, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def add_user(db, user_id: str, email: str, name: str = "") -> User:
    user = User(id=user_id, email=email, name=name or user_id, image="")
    db.add(user)
    db.commit()
    return user


def add_workspace(db, workspace_id: str, owner_id: str, name: str = "", role: str = "ADMIN") -> Workspace:
    ws = Workspace(id=workspace_id, name=name or workspace_id, slug=workspace_id, owner_id=owner_id)
    db.add(ws)
    db.flush()
    db.add(WorkspaceMember(user_id=owner_id, workspace_id=workspace_id, role=role))
    db.commit()
    return ws
