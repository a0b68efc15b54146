from conftest import PASSWORD, login, register, signup


def test_register_creates_regular_user(client):
    user = register(client, "alice@acme.io", "Alice")
    assert user["email"] == "alice@acme.io"
    assert user["role"] == "user"
    assert "hashed_password" not in user


def test_allow_listed_email_registers_as_superuser(client):
    assert register(client, "admin@ai.ru")["role"] == "superuser"


def test_register_rejects_duplicate_email_case_insensitively(client):
    register(client, "alice@acme.io")
    response = client.post(
        "/api/auth/register",
        json={"email": "ALICE@acme.io", "name": "A", "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert response.status_code == 409


def test_register_validates_passwords(client):
    body = {"email": "bob@acme.io", "name": "Bob", "password": "secret1", "confirm_password": "secret2"}
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Passwords do not match"

    body.update(password="123", confirm_password="123")
    assert client.post("/api/auth/register", json=body).status_code == 400


def test_register_rejects_blank_or_malformed_email(client):
    body = {"email": "   ", "name": "Bob", "password": PASSWORD, "confirm_password": PASSWORD}
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Please fill in all fields"

    body["email"] = "bob-at-acme"
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a valid email address"


def test_login_and_me(client):
    register(client, "alice@acme.io", "Alice")
    response = client.post("/api/auth/login", data={"username": "alice@acme.io", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["name"] == "Alice"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "alice@acme.io"


def test_login_with_wrong_password(client):
    register(client, "alice@acme.io")
    response = client.post("/api/auth/login", data={"username": "alice@acme.io", "password": "nope-nope"})
    assert response.status_code == 401


def test_protected_routes_require_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/projects", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_update_profile(client):
    _, headers = signup(client, "alice@acme.io", "Alice")
    response = client.patch("/api/auth/me", json={"name": "  Alice B ", "avatar": "https://img/a.png"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Alice B"
    assert response.json()["avatar"] == "https://img/a.png"

    assert client.patch("/api/auth/me", json={"name": "   "}, headers=headers).status_code == 400


def test_login_is_case_insensitive_on_email(client):
    register(client, "alice@acme.io")
    assert login(client, "Alice@Acme.io")
