"""Pytest configuration and shared fixtures."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_FILE"] = ""
os.environ["FESTIVAL_YEAR"] = "2025"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal
from main import app

PASSWORD = "secret1"


def clear_tables():
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_database():
    clear_tables()
    yield
    clear_tables()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client():
    def _make_client(**kwargs) -> TestClient:
        return TestClient(app, follow_redirects=False, **kwargs)
    return _make_client


@pytest.fixture
def extra_route():
    """Register throwaway routes on the app for the duration of a test."""
    added = []

    def _add(path, endpoint, methods=("GET",)):
        app.add_api_route(path, endpoint, methods=list(methods))
        added.append(app.router.routes[-1])

    yield _add
    for route in added:
        app.router.routes.remove(route)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


def register(client: TestClient, username: str, password: str = PASSWORD):
    return client.post("/register", data={
        "username": username,
        "password": password,
        "confirmPassword": password,
    })


@pytest.fixture
def alice(make_client) -> TestClient:
    """Client logged in as a freshly registered user 'alice'."""
    c = make_client()
    assert register(c, "alice").status_code == 302
    return c


@pytest.fixture
def bob(make_client) -> TestClient:
    c = make_client()
    assert register(c, "bob").status_code == 302
    return c
