import os

# configure before the app module builds its engine and settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aedura.api import app
from aedura.auth import get_db, get_hasher, get_settings, get_token_service
from aedura.config import Settings
from aedura.database import init_db
from aedura.directory import UserDirectory
from aedura.passwords import CredentialHasher
from aedura.tokens import TokenService

SECRET = "test-secret"


@pytest.fixture
def session_local():
    """Provide an isolated in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
        hide_parameters=True,
    )
    init_db(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def db(session_local):
    session = session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def directory(db):
    return UserDirectory(db)


@pytest.fixture
def hasher():
    # cheapest argon2 parameters; production costs come from Settings
    return CredentialHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def tokens():
    return TokenService(SECRET)


@pytest.fixture
def app_settings():
    return Settings(jwt_secret=SECRET, database_url="sqlite://")


@pytest.fixture
def client(session_local, hasher, tokens, app_settings):
    def override_get_db():
        session = session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_settings] = lambda: app_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def advisory_payload():
    return {
        "name": "Jane",
        "email": "Jane@Demo.com",
        "password": "CorrectHorseBattery1",
        "roleType": "advisory",
        "advisory": {
            "positionTitle": "Dean",
            "experienceYears": "18",
            "domain": "Higher Ed",
            "lmsFeatures": "Analytics dashboards and SIS integrations",
        },
    }


@pytest.fixture
def contributor_payload():
    return {
        "name": "  Sam Rivera ",
        "email": " sam@example.org ",
        "password": "hunter2hunter2",
        "roleType": "contributor",
        "contributor": {
            "role": "educator",
            "experienceText": "  Ten years teaching secondary maths  ",
            "technique": "flipped_classroom",
        },
    }
