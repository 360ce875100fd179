"""Shared fixtures: a fresh in-memory database per test, wired into the app."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from life_kanban.db import create_db_engine, get_db, init_db
from life_kanban.main import app


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield sessionmaker(autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def make_client(session_factory):
    """Build API clients that share one database but keep separate cookie jars."""

    def override_get_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield lambda **kwargs: TestClient(app, **kwargs)
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def login_as():
    """Register (if needed) and log a client in."""

    def _login(client, email="a@x.com", password="password1"):
        client.post("/auth/register", json={"email": email, "password": password})
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        return response.json()

    return _login
