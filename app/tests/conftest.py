import base64
import io

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlalchemy.orm.session import Session

from app.database.base import Base
from app.database.connection import ConnectionManager
from app.database.db import get_connection_manager
from app.main import app

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_connections = ConnectionManager(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Minimal valid 1x1 pixel black GIF (43 bytes)
GIF_BYTES = base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    handle = test_connections.connect()
    yield handle
    Base.metadata.drop_all(bind=handle.engine)
    test_connections.dispose()


# Override the connection dependency
app.dependency_overrides[get_connection_manager] = lambda: test_connections


@pytest.fixture
def connections(setup_database) -> ConnectionManager:
    return test_connections


@pytest.fixture
def db_session(setup_database) -> Session:
    db: Session = setup_database.session_factory()
    try:
        yield db
    finally:
        db.close()
        # Each test starts from empty tables
        with setup_database.engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


@pytest.fixture
def client(db_session):
    with TestClient(app) as client:
        yield client


class FakeTask:
    """Records .delay() calls instead of publishing to the broker."""

    def __init__(self):
        self.calls = []

    def delay(self, *args):
        self.calls.append(args)


# Never talk to the real broker from tests
@pytest.fixture(autouse=True)
def queued_tasks(monkeypatch: pytest.MonkeyPatch) -> FakeTask:
    fake = FakeTask()
    monkeypatch.setattr("app.routes.events.retry_event_image_upload_task", fake)
    return fake


@pytest.fixture
def event_fields() -> dict:
    return {
        "title": "PyCon Berlin 2025",
        "description": "A conference for the Python community.",
        "overview": "Three days of talks and sprints.",
        "image": "https://img.example.com/pycon.png",
        "venue": "bcc Berlin",
        "location": "Berlin, Germany",
        "date": "2025-04-23",
        "time": "9:00 am",
        "mode": "offline",
        "audience": "Developers",
        "agenda": ["Keynote", "Talks", "Sprints"],
        "organizer": "Python Software Verband",
        "tags": ["python", "conference"],
    }


@pytest.fixture
def event_form(event_fields) -> tuple[dict, dict]:
    """Multipart form fields and files for POST /events."""
    data = {k: v for k, v in event_fields.items() if k != "image"}
    dummy_file = io.BytesIO(GIF_BYTES)
    dummy_file.name = "dummy.gif"
    files = {"image": (dummy_file.name, dummy_file, "image/gif")}
    return data, files


# Image host is unconfigured unless a test fills this in
@pytest.fixture(autouse=True)
def cloudinary_config(monkeypatch: pytest.MonkeyPatch) -> dict:
    cfg = {"cloud_name": "", "api_key": "", "api_secret": "", "upload_preset": "dev-events"}
    monkeypatch.setattr("app.services.images.get_cloudinary_config", lambda: cfg)
    return cfg
