import os

# Configure the app before syncdesk is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTH_REQUIRED"] = "false"
os.environ["CLERK_JWKS_URL"] = ""
os.environ["REDIS_URL"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from syncdesk import config  # noqa: E402
from syncdesk.database import Base, SessionLocal, engine  # noqa: E402
from syncdesk.main import app  # noqa: E402


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(config, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(db_session, upload_dir):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def song(client):
    response = client.post(
        "/api/songs",
        json={
            "title": "Golden Hour",
            "artist": "Ava Lane",
            "composerPublishers": [
                {"composer": "Ava Lane", "publisher": "Lane Songs", "publishingOwnership": 50, "isMine": True},
                {"composer": "Sam Ortiz", "publisher": "Ortiz Music", "publishingOwnership": 50, "isMine": False},
            ],
            "artistLabels": [
                {"artist": "Ava Lane", "label": "Northbound", "labelOwnership": 100, "isMine": True},
            ],
        },
    )
    assert response.status_code == 200, response.text
    return response.json()
