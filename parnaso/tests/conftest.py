import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "parnaso_test.db"
    # Point the app to this temp DB and away from any developer config.yaml
    os.environ["PARNASO_DB_PATH"] = str(path)
    os.environ["PARNASO_CONFIG"] = str(path.parent / "missing-config.yaml")
    os.environ.pop("PARNASO_STORAGE", None)
    schema = Path(_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from parnaso.logs import ensure_log_schema
    from parnaso.services.config_svc import ensure_default_config
    ensure_log_schema()
    ensure_default_config()
    # Import app after DB ready so startup hooks can use it
    from parnaso.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path, monkeypatch):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("PARNASO_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    monkeypatch.delenv("PARNASO_STORAGE", raising=False)
    tables = [
        "auth_token",
        "writing_sessions",
        "projects",
        "user_settings",
        "profiles",
        "local_storage",
        "operation_log",
        "config",
    ]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    from parnaso.services.config_svc import ensure_default_config
    ensure_default_config()
    yield


@pytest.fixture()
def local_mode(monkeypatch):
    monkeypatch.setenv("PARNASO_STORAGE", "local")


@pytest.fixture()
def make_user(client):
    """Register a user through the API; returns (user, auth headers)."""
    def _make(name="Ana", email="ana@example.com", password="segredo123", admin=False):
        r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        if admin:
            from parnaso.logs import LogContext
            from parnaso.services.auth_svc import promote
            promote(email, LogContext("PROMOTE_ADMIN", "test"))
        r = client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}
    return _make
