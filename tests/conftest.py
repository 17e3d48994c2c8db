from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from asktaaza.auth import hash_password
from asktaaza.config import Settings
from asktaaza.db import get_session, init_db
from asktaaza.main import create_app
from asktaaza.models import Question, User


NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    u = User(email="dev@example.com", name="dev", password_hash=hash_password("secret"))
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def make_question(db, user):
    def _make(content="What is a hash map and how does it work?", days_old=0.0, **fields):
        fields.setdefault("company", "Acme")
        fields.setdefault("interview_date", NOW - timedelta(days=days_old + 1))
        q = Question(
            content=content,
            user_id=user.id,
            created_at=NOW - timedelta(days=days_old),
            updated_at=NOW - timedelta(days=days_old),
            **fields,
        )
        db.add(q)
        db.commit()
        db.refresh(q)
        return q

    return _make


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setenv("ASKTAAZA_ADMIN_EMAILS", "admin@example.com")
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def _session():
        s = TestingSession()
        try:
            yield s
        finally:
            s.close()

    app = create_app(init_database=False)
    app.dependency_overrides[get_session] = _session
    return TestClient(app)
