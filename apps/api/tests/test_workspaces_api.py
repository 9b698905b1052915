"""HTTP tests for the workspace routes."""

from __future__ import annotations

from conftest import add_user, add_workspace, auth_headers

from projectflow.db.models import Comment, Project, ProjectMember, Task, WorkspaceMember


def _seed_tree(db):
    add_user(db, "user_a", "a@example.com", name="Ada")
    add_user(db, "user_b", "b@example.com", name="Bob")
    add_workspace(db, "org_a", "user_a", name="Alpha")
    add_workspace(db, "org_b", "user_b", name="Beta")

    project = Project(workspace_id="org_a", name="Launch", team_lead="user_a")
    db.add(project)
    db.flush()
    db.add(ProjectMember(user_id="user_a", project_id=project.id))
    task = Task(project_id=project.id, title="Write docs", assignee_id="user_a")
    db.add(task)
    db.flush()
    db.add(Comment(content="On it", user_id="user_a", task_id=task.id))
    db.commit()
    return project, task


def test_list_workspaces_requires_token(client):
    r = client.get("/api/workspaces")
    assert r.status_code == 401
    assert r.json()["detail"] == "Unauthorized"


def test_list_workspaces_rejects_bad_token(client):
    r = client.get("/api/workspaces", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_list_workspaces_returns_member_workspaces_with_tree(client, db):
    project, task = _seed_tree(db)

    r = client.get("/api/workspaces", headers=auth_headers("user_a"))
    assert r.status_code == 200

    workspaces = r.json()["workspaces"]
    assert [w["id"] for w in workspaces] == ["org_a"]

    ws = workspaces[0]
    assert ws["name"] == "Alpha"
    assert ws["ownerId"] == "user_a"
    assert ws["owner"]["email"] == "a@example.com"
    assert ws["members"][0]["role"] == "ADMIN"
    assert ws["members"][0]["user"]["name"] == "Ada"

    proj = ws["projects"][0]
    assert proj["id"] == str(project.id)
    assert proj["workspaceId"] == "org_a"
    assert proj["teamLead"] == "user_a"
    assert proj["members"][0]["userId"] == "user_a"

    t = proj["tasks"][0]
    assert t["id"] == str(task.id)
    assert t["projectId"] == str(project.id)
    assert t["assigneeId"] == "user_a"
    assert t["assignee"]["email"] == "a@example.com"
    assert t["comments"][0]["content"] == "On it"
    assert t["comments"][0]["user"]["id"] == "user_a"


def test_list_workspaces_includes_workspaces_joined_as_member(client, db):
    _seed_tree(db)
    db.add(WorkspaceMember(user_id="user_a", workspace_id="org_b", role="MEMBER"))
    db.commit()

    r = client.get("/api/workspaces", headers=auth_headers("user_a"))
    assert sorted(w["id"] for w in r.json()["workspaces"]) == ["org_a", "org_b"]


def test_list_workspaces_empty_projects_is_a_list(client, db):
    add_user(db, "user_c", "c@example.com")
    add_workspace(db, "org_c", "user_c")

    r = client.get("/api/workspaces", headers=auth_headers("user_c"))
    assert r.json()["workspaces"][0]["projects"] == []


def test_add_member_success(client, db):
    _seed_tree(db)

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_a"),
        json={"email": "B@example.com", "workspaceId": "org_a", "role": "MEMBER", "message": "Welcome"},
    )
    assert r.status_code == 200

    body = r.json()
    assert body["message"] == "Member added successfully"
    assert body["member"]["userId"] == "user_b"
    assert body["member"]["workspaceId"] == "org_a"
    assert body["member"]["role"] == "MEMBER"
    assert body["member"]["message"] == "Welcome"


def test_add_member_requires_fields(client, db):
    _seed_tree(db)

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_a"),
        json={"email": "b@example.com", "workspaceId": "org_a"},
    )
    assert r.status_code == 400


def test_add_member_rejects_unknown_role(client, db):
    _seed_tree(db)

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_a"),
        json={"email": "b@example.com", "workspaceId": "org_a", "role": "OWNER"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid role specified"


def test_add_member_unknown_user(client, db):
    _seed_tree(db)

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_a"),
        json={"email": "nobody@example.com", "workspaceId": "org_a", "role": "MEMBER"},
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "User not found"


def test_add_member_unknown_workspace(client, db):
    _seed_tree(db)

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_a"),
        json={"email": "b@example.com", "workspaceId": "org_missing", "role": "MEMBER"},
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Workspace not found"


def test_add_member_requires_admin(client, db):
    _seed_tree(db)
    add_user(db, "user_c", "c@example.com")
    db.add(WorkspaceMember(user_id="user_b", workspace_id="org_a", role="MEMBER"))
    db.commit()

    r = client.post(
        "/api/workspaces/add-member",
        headers=auth_headers("user_b"),
        json={"email": "c@example.com", "workspaceId": "org_a", "role": "MEMBER"},
    )
    assert r.status_code == 403


def test_add_member_rejects_duplicate(client, db):
    _seed_tree(db)
    payload = {"email": "b@example.com", "workspaceId": "org_a", "role": "ADMIN"}

    first = client.post("/api/workspaces/add-member", headers=auth_headers("user_a"), json=payload)
    second = client.post("/api/workspaces/add-member", headers=auth_headers("user_a"), json=payload)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["detail"] == "User is already a member of the workspace"


def test_health_routes(client):
    assert client.get("/").text == "Server is Live!"

    r = client.get("/db-test")
    assert r.status_code == 200
    assert r.json()["status"] == "success"
    assert r.json()["data"] == [{"result": 1}]
