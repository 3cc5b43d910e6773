"""Shared test fixtures and configuration."""
from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

OWNER = "owner-1"
OTHER_OWNER = "owner-2"
TOKENS = {"tok-owner-1": OWNER, "tok-owner-2": OTHER_OWNER}


@pytest.fixture(autouse=True)
def mock_env(monkeypatch):
    """Set minimum required environment variables for all tests."""
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("APP_TIMEZONE", "America/New_York")
    monkeypatch.setenv("API_TOKENS", "tok-owner-1:owner-1,tok-owner-2:owner-2")


@pytest.fixture
def db():
    """In-memory SQLite shared across threads, so TestClient requests see the same data."""
    from boomerang.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db):
    from boomerang.services.task_store import TaskStore
    return TaskStore(db)


@pytest.fixture
def make_task(store):
    """Factory: persist a pending task (and its capture) for an owner."""
    from boomerang.models.enums import TaskType, Timing, delivery_method_for
    from boomerang.services.scheduling import LOCAL_TZ, compute_scheduled_for
    from boomerang.services.task_mapping import TaskDraft

    def _make(
        owner_id=OWNER,
        task_type=TaskType.FOLLOW_UP_SMS,
        contact_name="Sarah Johnson",
        contact_phone="+15551234567",
        contact_email=None,
        message="Hi Sarah, the revised estimate is on its way.",
        timing=Timing.TOMORROW,
        transcription="Text Sarah about the kitchen estimate",
    ):
        now = datetime(2025, 6, 2, 10, 0, tzinfo=LOCAL_TZ)
        capture = store.create_capture(owner_id, transcription)
        draft = TaskDraft(
            task_type=task_type,
            delivery_method=delivery_method_for(task_type),
            message=message,
            timing=timing,
            scheduled_for=compute_scheduled_for(timing, now),
            source_function="send_sms",
            contact_name=contact_name,
            contact_phone=contact_phone,
            contact_email=contact_email,
        )
        return store.create_task(owner_id, capture.id, draft)

    return _make


@pytest.fixture
def client(db):
    """TestClient with the store pointed at the in-memory database."""
    from fastapi.testclient import TestClient
    from boomerang.db.session import get_db
    from boomerang.main import app
    import boomerang.services.auth_service as auth_mod

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with patch.dict(auth_mod.API_TOKENS, TOKENS, clear=True):
        yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"Authorization": "Bearer tok-owner-1"}
