from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from foodlink.auth.security import create_access_token
from foodlink.core.rate_limit import RateLimiter
from foodlink.db.init import init_db
from foodlink.db.session import Base, get_db
from foodlink.main import app
from foodlink.models.profile import Profile


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    previous_limiter = app.state.submission_limiter
    app.dependency_overrides[get_db] = override_get_db
    app.state.submission_limiter = RateLimiter(limit=1000, window_seconds=900)
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.submission_limiter = previous_limiter


@pytest.fixture
def make_user(db_session):
    """Create a profile and return Authorization headers for it."""

    def _make(user_id: str, role: str, first_name: str = None, last_name: str = None) -> dict:
        db_session.add(Profile(id=user_id, role=role, first_name=first_name, last_name=last_name))
        db_session.commit()
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _make


@pytest.fixture
def add_record(db_session):
    """Insert a record directly, bypassing the API."""

    def _add(model, user_id: str, food_type: str = "tomatoes", created_at: datetime = None, **fields):
        values = {
            "user_id": user_id,
            "food_type": food_type,
            "location": {"lat": 0.0, "lng": 0.0},
            "price": 1,
            "quantity": 1,
            "status": "active",
        }
        values.update(fields)
        if created_at is not None:
            values["created_at"] = created_at
        record = model(**values)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _add
