from conftest import add_member, create_project, signup


def test_settings_defaults_and_partial_update(client):
    _, headers = signup(client, "alice@acme.io")
    assert client.get("/api/settings", headers=headers).json() == {
        "rag_examples_count": 3,
        "debug_mode": True,
        "rag_similarity_threshold": 0.4,
    }

    response = client.patch("/api/settings", json={"debug_mode": False}, headers=headers)
    assert response.status_code == 200
    assert response.json()["debug_mode"] is False
    assert response.json()["rag_examples_count"] == 3


def test_settings_ranges_enforced(client):
    _, headers = signup(client, "alice@acme.io")
    assert client.patch("/api/settings", json={"rag_examples_count": 11}, headers=headers).status_code == 400
    assert client.patch("/api/settings", json={"rag_similarity_threshold": -0.1}, headers=headers).status_code == 400
    assert client.get("/api/settings", headers=headers).json()["rag_examples_count"] == 3


def test_settings_are_per_user(client):
    _, alice_headers = signup(client, "alice@acme.io")
    _, bob_headers = signup(client, "bob@acme.io")
    client.patch("/api/settings", json={"rag_examples_count": 7}, headers=alice_headers)
    assert client.get("/api/settings", headers=bob_headers).json()["rag_examples_count"] == 3


def test_admin_routes_require_superuser(client):
    _, headers = signup(client, "alice@acme.io")
    assert client.get("/api/admin/users", headers=headers).status_code == 403
    assert client.get("/api/admin/stats", headers=headers).status_code == 403


def test_admin_lists_users_and_stats(client, admin, project):
    _, headers = admin
    alice, _ = signup(client, "alice@acme.io")
    add_member(client, headers, project["id"], alice["id"], "viewer")

    emails = [u["email"] for u in client.get("/api/admin/users", headers=headers).json()]
    assert emails == ["admin@ai.ru", "alice@acme.io"]
    assert client.get("/api/admin/stats", headers=headers).json() == {"users": 2, "projects": 1, "memberships": 2}

    memberships = client.get(f"/api/admin/users/{alice['id']}/memberships", headers=headers).json()
    assert [(m["project_id"], m["role"]) for m in memberships] == [(project["id"], "viewer")]


def test_promoting_user_grants_superuser_powers(client, admin):
    admin_user, headers = admin
    alice, alice_headers = signup(client, "alice@acme.io")

    assert client.patch(f"/api/admin/users/{alice['id']}/role", json={"role": "king"}, headers=headers).status_code == 400
    response = client.patch(f"/api/admin/users/{alice['id']}/role", json={"role": "superuser"}, headers=headers)
    assert response.json()["role"] == "superuser"
    assert create_project(client, alice_headers, name="Alice project")["role"] == "admin"


def test_admin_cannot_demote_self(client, admin):
    admin_user, headers = admin
    response = client.patch(f"/api/admin/users/{admin_user['id']}/role", json={"role": "user"}, headers=headers)
    assert response.status_code == 400


def test_global_admin_role_grants_no_project_access(client, admin, project):
    _, headers = admin
    alice, alice_headers = signup(client, "alice@acme.io")
    client.patch(f"/api/admin/users/{alice['id']}/role", json={"role": "admin"}, headers=headers)
    assert client.get(f"/api/projects/{project['id']}", headers=alice_headers).status_code == 403
    assert client.get("/api/admin/users", headers=alice_headers).status_code == 403


def test_root_health(client):
    assert client.get("/").json() == {"message": "AI2SQL API is running"}
