from conftest import add_member, create_project, row_count, signup

from ai2sql.database.models import Chat, DatabaseConnection, Message, ProjectMember, SqlExample, TableMetadata, UserNote


def test_superuser_creates_project_and_becomes_admin_member(client, admin):
    admin_user, headers = admin
    project = create_project(client, headers, name="  Sales analytics ", description="  Q3 ")
    assert project["name"] == "Sales analytics"
    assert project["description"] == "Q3"
    assert project["role"] == "admin"

    members = client.get(f"/api/projects/{project['id']}/members", headers=headers).json()
    assert [(m["user_id"], m["role"]) for m in members] == [(admin_user["id"], "admin")]


def test_regular_user_cannot_create_project(client):
    _, headers = signup(client, "alice@acme.io")
    response = client.post("/api/projects", json={"name": "Mine"}, headers=headers)
    assert response.status_code == 403


def test_allow_listed_email_can_create_even_with_demoted_role(client, admin):
    _, headers = admin
    root, root_headers = signup(client, "root@acme.io")
    client.patch(f"/api/admin/users/{root['id']}/role", json={"role": "user"}, headers=headers)
    assert create_project(client, root_headers, name="Root project")["role"] == "admin"


def test_project_name_validation_and_uniqueness(client, admin, project):
    _, headers = admin
    assert client.post("/api/projects", json={"name": "ab"}, headers=headers).status_code == 400
    assert client.post("/api/projects", json={"name": "x" * 101}, headers=headers).status_code == 400
    response = client.post("/api/projects", json={"name": " SALES ANALYTICS "}, headers=headers)
    assert response.status_code == 409


def test_list_shows_only_member_projects_with_role(client, admin, project):
    _, headers = admin
    other = create_project(client, headers, name="Marketing")
    alice, alice_headers = signup(client, "alice@acme.io")
    add_member(client, headers, project["id"], alice["id"], "viewer")

    listed = client.get("/api/projects", headers=alice_headers).json()
    assert [(p["id"], p["role"]) for p in listed] == [(project["id"], "viewer")]

    assert client.get(f"/api/projects/{other['id']}", headers=alice_headers).status_code == 403
    assert len(client.get("/api/projects", headers=headers).json()) == 2


def test_unknown_project_is_404(client, admin):
    _, headers = admin
    assert client.get("/api/projects/does-not-exist", headers=headers).status_code == 404


def test_current_project_uses_last_selection(client, admin, project):
    _, headers = admin
    newer = create_project(client, headers, name="Marketing")
    assert client.get("/api/projects/current", headers=headers).json()["id"] == newer["id"]

    assert client.post(f"/api/projects/{project['id']}/select", headers=headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).json()["last_project_id"] == project["id"]
    assert client.get("/api/projects/current", headers=headers).json()["id"] == project["id"]


def test_current_project_404_without_access(client, project):
    _, headers = signup(client, "alice@acme.io")
    assert client.get("/api/projects/current", headers=headers).status_code == 404


def test_select_inaccessible_project_is_forbidden(client, project):
    _, headers = signup(client, "alice@acme.io")
    assert client.post(f"/api/projects/{project['id']}/select", headers=headers).status_code == 403


def test_update_project_requires_project_admin(client, admin, project):
    _, headers = admin
    editor, editor_headers = signup(client, "ed@acme.io")
    manager, manager_headers = signup(client, "pm@acme.io")
    add_member(client, headers, project["id"], editor["id"], "editor")
    add_member(client, headers, project["id"], manager["id"], "admin")

    url = f"/api/projects/{project['id']}"
    assert client.patch(url, json={"name": "Renamed"}, headers=editor_headers).status_code == 403
    response = client.patch(url, json={"description": "New text"}, headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Sales analytics"
    assert response.json()["description"] == "New text"


def test_delete_project_cascades_and_clears_last_project(client, admin, project):
    _, headers = admin
    alice, alice_headers = signup(client, "alice@acme.io")
    add_member(client, headers, project["id"], alice["id"], "editor")
    pid = project["id"]
    client.post(f"/api/projects/{pid}/select", headers=alice_headers)
    client.post(f"/api/projects/{pid}/notes", json={"title": "t", "content": "c"}, headers=alice_headers)
    chat = client.post(f"/api/projects/{pid}/chats", json={"name": "Orders"}, headers=alice_headers).json()
    client.post(f"/api/chats/{chat['id']}/messages", json={"content": "top customers?"}, headers=alice_headers)
    client.post(
        f"/api/projects/{pid}/examples", json={"natural_language_query": "q", "sql_query": "SELECT 1"}, headers=headers
    )
    client.post(
        f"/api/projects/{pid}/connections",
        json={"name": "DB", "host": "127.0.0.1", "port": 5432, "username": "u", "password": "", "database": "d"},
        headers=headers,
    )
    client.put(f"/api/projects/{pid}/metadata", json=[{"table_name": "users"}], headers=headers)
    owned = [Chat, UserNote, SqlExample, DatabaseConnection, TableMetadata, ProjectMember]
    assert all(row_count(model, project_id=pid) > 0 for model in owned)
    assert row_count(Message, chat_id=chat["id"]) == 2

    assert client.delete(f"/api/projects/{pid}", headers=alice_headers).status_code == 403
    assert client.delete(f"/api/projects/{pid}", headers=headers).status_code == 204

    assert client.get("/api/auth/me", headers=alice_headers).json()["last_project_id"] is None
    assert client.get(f"/api/admin/users/{alice['id']}/memberships", headers=headers).json() == []
    assert [model.__name__ for model in owned if row_count(model, project_id=pid)] == []
    assert row_count(Message, chat_id=chat["id"]) == 0


def test_non_superuser_delete_does_not_reveal_unknown_projects(client, project):
    _, headers = signup(client, "alice@acme.io")
    assert client.delete("/api/projects/no-such-project", headers=headers).status_code == 403
    assert client.delete(f"/api/projects/{project['id']}", headers=headers).status_code == 403
