from conftest import add_member, signup

CONNECTION = {
    "name": "Production DB",
    "host": "127.0.0.1",
    "port": 1,
    "username": "reporter",
    "password": "pw",
    "database": "ai2sql_db",
}


def connections_url(project):
    return f"/api/projects/{project['id']}/connections"


def create_connection(client, headers, project, **overrides):
    response = client.post(connections_url(project), json={**CONNECTION, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_first_connection_becomes_default(client, admin, project):
    _, headers = admin
    first = create_connection(client, headers, project)
    second = create_connection(client, headers, project, name="Replica")
    assert first["is_default"] is True
    assert second["is_default"] is False
    assert client.get(f"/api/projects/{project['id']}", headers=headers).json()["connection_id"] == first["id"]

    selected = client.post(f"{connections_url(project)}/{second['id']}/select", headers=headers)
    assert selected.json()["is_default"] is True
    listed = {c["name"]: c["is_default"] for c in client.get(connections_url(project), headers=headers).json()}
    assert listed == {"Production DB": False, "Replica": True}


def test_connection_validation(client, admin, project):
    _, headers = admin
    url = connections_url(project)
    assert client.post(url, json={**CONNECTION, "host": "  "}, headers=headers).status_code == 400
    assert client.post(url, json={**CONNECTION, "port": 0}, headers=headers).status_code == 400


def test_update_and_delete_default_connection(client, admin, project):
    _, headers = admin
    conn = create_connection(client, headers, project)
    url = f"{connections_url(project)}/{conn['id']}"

    updated = client.patch(url, json={"port": 6543, "password": ""}, headers=headers).json()
    assert (updated["port"], updated["password"], updated["host"]) == (6543, "", "127.0.0.1")
    assert client.patch(url, json={"database": " "}, headers=headers).status_code == 400

    assert client.delete(url, headers=headers).status_code == 204
    assert client.get(f"/api/projects/{project['id']}", headers=headers).json()["connection_id"] is None
    assert client.delete(url, headers=headers).status_code == 404


def test_members_view_but_only_managers_change(client, admin, project):
    _, headers = admin
    editor, editor_headers = signup(client, "ed@acme.io")
    add_member(client, headers, project["id"], editor["id"], "editor")
    conn = create_connection(client, headers, project)

    assert len(client.get(connections_url(project), headers=editor_headers).json()) == 1
    assert client.post(connections_url(project), json=CONNECTION, headers=editor_headers).status_code == 403
    assert client.post(f"{connections_url(project)}/{conn['id']}/test", headers=editor_headers).status_code == 403


def test_connection_test_reports_failure(client, admin, project):
    _, headers = admin
    conn = create_connection(client, headers, project)
    response = client.post(f"{connections_url(project)}/{conn['id']}/test", headers=headers)
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_table_metadata_replace(client, admin, project):
    _, headers = admin
    viewer, viewer_headers = signup(client, "viewer@acme.io")
    add_member(client, headers, project["id"], viewer["id"], "viewer")
    url = f"/api/projects/{project['id']}/metadata"

    tables = [
        {"table_name": "users", "columns": [{"name": "id", "type": "uuid", "nullable": False, "is_primary_key": True}]},
        {"table_name": "orders", "schema_name": "sales", "columns": []},
    ]
    response = client.put(url, json=tables, headers=headers)
    assert response.status_code == 200
    assert [(t["schema_name"], t["table_name"]) for t in response.json()] == [("public", "users"), ("sales", "orders")]
    assert response.json()[0]["columns"][0]["is_primary_key"] is True

    assert client.put(url, json=[], headers=viewer_headers).status_code == 403
    assert len(client.get(url, headers=viewer_headers).json()) == 2

    client.put(url, json=[{"table_name": "products"}], headers=headers)
    assert [t["table_name"] for t in client.get(url, headers=headers).json()] == ["products"]
