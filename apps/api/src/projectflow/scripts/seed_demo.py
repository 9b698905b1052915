from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from projectflow.core.logging import configure_logging
from projectflow.db.session import SessionLocal
from projectflow.db.models import Project, ProjectMember, Task, User, Workspace, WorkspaceMember

log = structlog.get_logger(__name__)

DEMO_USER_ID = "user_demo_1"
DEMO_WORKSPACE_ID = "org_demo_1"
DEMO_PROJECT_NAME = "Demo Project"
DEMO_TASK_TITLE = "Demo Task"


def seed(db: Optional[Session] = None) -> int:
    """
    Create a demo user who administers one workspace with one project and task.
    Rows that already exist are left alone; returns how many rows were created.
    """
    owns_session = db is None
    if db is None:
        db = SessionLocal()
    try:
        created = 0

        user = db.get(User, DEMO_USER_ID)
        if not user:
            user = User(id=DEMO_USER_ID, name="Demo User", email="demo@example.com", image="")
            db.add(user)
            created += 1

        ws = db.get(Workspace, DEMO_WORKSPACE_ID)
        if not ws:
            ws = Workspace(id=DEMO_WORKSPACE_ID, name="Demo Workspace", slug="demo-workspace", owner_id=user.id)
            db.add(ws)
            db.add(WorkspaceMember(user_id=user.id, workspace_id=ws.id, role="ADMIN"))
            created += 2
        db.flush()

        project = db.execute(
            select(Project).where(Project.workspace_id == ws.id, Project.name == DEMO_PROJECT_NAME)
        ).scalar_one_or_none()
        if not project:
            project = Project(workspace_id=ws.id, name=DEMO_PROJECT_NAME, team_lead=user.id)
            db.add(project)
            db.flush()
            db.add(ProjectMember(user_id=user.id, project_id=project.id))
            db.add(
                Task(
                    project_id=project.id,
                    title=DEMO_TASK_TITLE,
                    assignee_id=user.id,
                    due_date=datetime.now(timezone.utc) + timedelta(days=1),
                )
            )
            created += 3

        db.commit()
        log.info("seed_complete", created=created)
        return created
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
