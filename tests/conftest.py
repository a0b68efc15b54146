import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["SUPERUSER_EMAILS"] = "admin@ai.ru,root@acme.io"

import re

import numpy as np
import pytest
from fastapi.testclient import TestClient

from ai2sql.database.db import Base, SessionLocal, engine
from ai2sql.main import app
from ai2sql.services import example_search

PASSWORD = "secret123"


class BagOfWordsEncoder:
    """Offline stand-in for the sentence-transformers model: one dimension per distinct word."""

    def __init__(self, size=512):
        self.size = size
        self.vocabulary = {}

    def encode(self, texts, **kwargs):
        vectors = np.zeros((len(texts), self.size), dtype=np.float32)
        for row, text in enumerate(texts):
            for word in re.findall(r"\w+", text.lower()):
                column = self.vocabulary.setdefault(word, len(self.vocabulary) % self.size)
                vectors[row, column] += 1.0
        return vectors


@pytest.fixture(autouse=True)
def embedding_model(monkeypatch):
    encoder = BagOfWordsEncoder()
    monkeypatch.setattr(example_search, "_embedding_model", encoder)
    return encoder


@pytest.fixture
def client():
    Base.metadata.create_all(bind=engine)
    try:
        yield TestClient(app)
    finally:
        Base.metadata.drop_all(bind=engine)


def register(client, email, name="Test User", password=PASSWORD):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "name": name, "password": password, "confirm_password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def signup(client, email, name="Test User"):
    """Registers and logs in; returns (user dict, auth headers)."""
    user = register(client, email, name)
    return user, login(client, email)


def create_project(client, headers, name="Sales analytics", description=None):
    response = client.post("/api/projects", json={"name": name, "description": description}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def add_member(client, headers, project_id, user_id, role):
    response = client.post(
        f"/api/projects/{project_id}/members", json={"user_id": user_id, "role": role}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def admin(client):
    return signup(client, "admin@ai.ru", "Admin User")


@pytest.fixture
def project(client, admin):
    _, headers = admin
    return create_project(client, headers)


def row_count(model, **filters) -> int:
    """Rows of ``model`` matching the given column values, read straight from the database."""
    db = SessionLocal()
    try:
        return db.query(model).filter_by(**filters).count()
    finally:
        db.close()
