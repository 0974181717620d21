import os

# The module-level engine is built at import time.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import eod_assistant.models  # noqa: F401
from eod_assistant.db import Base
from eod_assistant.db import get_db
from eod_assistant.main import app


@pytest.fixture(autouse=True)
def clear_credential_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_USERNAME",
        "JIRA_EMAIL",
        "JIRA_API_TOKEN",
        "SLACK_DEFAULT_WEBHOOK_URL",
        "LLM_API_KEY",
        "LLM_BASE_URL",
        "LLM_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session_factory() -> sessionmaker[Session]:
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    return sessionmaker(bind=test_engine, autoflush=False, autocommit=False)


@pytest.fixture
def override_db(session_factory: sessionmaker[Session]):
    """Return a function pointing an app's `get_db` at the test database."""

    def apply(target_app: FastAPI) -> None:
        def override_get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        target_app.dependency_overrides[get_db] = override_get_db

    return apply


@pytest.fixture
def db_client(override_db) -> TestClient:
    override_db(app)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
