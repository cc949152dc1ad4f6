from pathlib import Path
from dotenv import load_dotenv
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Load environment variables for tests before the app reads its settings
load_dotenv(Path(__file__).resolve().parents[1] / '.env.test')

from berry_events.main import app  # noqa: E402
from berry_events.models.base import BaseModel  # noqa: E402
from berry_events.api.dependencies import get_db  # noqa: E402


def make_session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    BaseModel.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def setup_app():
    """Point the app's get_db at a fresh in-memory database and return its sessionmaker."""
    Session = make_session_factory()

    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    return Session


@pytest.fixture
def db():
    Session = make_session_factory()
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def api():
    """TestClient plus the sessionmaker backing it."""
    from fastapi.testclient import TestClient

    Session = setup_app()
    return TestClient(app), Session
