import pytest
from fastapi.testclient import TestClient

ADMIN_ID = "A123456789"
ADMIN_PASSWORD = "admin123"
USER_ID = "F131104093"
USER_PASSWORD = "rider99"


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "db.json"
    monkeypatch.setenv("RAILBOOK_DB_PATH", str(path))
    monkeypatch.setenv("ADMIN_ID", ADMIN_ID)
    monkeypatch.setenv("ADMIN_TOKEN", "s3cret")
    monkeypatch.setenv("RAILBOOK_TIMEZONE", "Asia/Taipei")
    return path


@pytest.fixture
def client(db_path):
    from railbook.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def accounts(client):
    for user_id, password in ((ADMIN_ID, ADMIN_PASSWORD), (USER_ID, USER_PASSWORD)):
        resp = client.post("/api/register", json={"id": user_id, "password": password})
        assert resp.status_code == 200
    return client
