"""Shared pytest fixtures for the CRM API tests.

Fixtures:
    - engine: in-memory SQLite engine with all tables created
    - db: session bound to that engine
    - settings: configuration with a known login and signing key
    - app: application wired to the test engine
    - client: anonymous TestClient
    - auth_client: TestClient holding a valid session cookie
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import Settings
from database import get_db, init_db
from main import create_app
from tests.payloads import PASSWORD, USERNAME


@pytest.fixture
def engine():
    """In-memory database shared by every connection of the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        admin_username=USERNAME,
        admin_password=PASSWORD,
        session_secret="test-signing-key",
        session_secret_generated=False,
    )


@pytest.fixture
def app(settings: Settings, engine):
    app = create_app(settings)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_client(app) -> TestClient:
    client = TestClient(app)
    response = client.post("/login", json={"username": USERNAME, "password": PASSWORD})
    assert response.status_code == 200
    return client
