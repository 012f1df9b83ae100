# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auth.credentials import Identity, get_credential_validator
from db import SessionLocal, get_db
from main import app
from models import Base
from models.location import Location  # noqa: F401 - register with Base
from utils.errors import Unauthenticated

# Tokens the stub users service accepts.
TOKENS = {
    "token-jeremy": Identity(user_id=1, username="jeremy"),
    "token-kelly": Identity(user_id=2, username="kelly"),
}


class StubValidator:
    """Resolves known tokens without calling the users service; records calls."""

    def __init__(self, tokens: dict[str, Identity]) -> None:
        self.tokens = tokens
        self.calls: list[str] = []

    def validate(self, token: str) -> Identity:
        self.calls.append(token)
        try:
            return self.tokens[token]
        except KeyError:
            raise Unauthenticated() from None


def _get_engine():
    """Engine used by the app (in-memory when TESTING=true)."""
    return SessionLocal.kw["bind"]


@pytest.fixture(scope="session")
def engine():
    """One in-memory engine per test run; create tables once."""
    eng = _get_engine()
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def db_session(engine):
    """Function-scoped session; each test runs in a transaction that is rolled back."""
    connection = engine.connect()
    trans = connection.begin()
    session = Session(bind=connection)
    session.begin_nested()
    try:
        yield session
    finally:
        session.close()
        if trans.is_active:
            trans.rollback()
        connection.close()


def _override_get_db(session):
    """Return a generator that yields the given session (for dependency override)."""
    def override():
        yield session
    return override


@pytest.fixture
def validator():
    return StubValidator(TOKENS)


@pytest.fixture
def client(db_session, validator):
    """API test client; overrides get_db and the credential validator, cleared on teardown."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    app.dependency_overrides[get_credential_validator] = lambda: validator
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Authorization header for user 1 (jeremy)."""
    return {"authorization": "Bearer token-jeremy"}
