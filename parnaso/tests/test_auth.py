from __future__ import annotations

import datetime as dt
from unittest.mock import patch

from parnaso.db import get_conn


def test_register_login_me_logout(client):
    r = client.post("/api/auth/register", json={"name": "Ana", "email": " Ana@Example.com ", "password": "segredo123"})
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["email"] == "ana@example.com"
    assert user["role"] == "user"
    assert user["isBlocked"] is False

    with get_conn() as conn:
        row = conn.execute("SELECT password_hash FROM profiles WHERE id=?", (user["id"],)).fetchone()
        assert row["password_hash"] != "segredo123"

    r = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "segredo123"})
    assert r.status_code == 200
    token = r.json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]

    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_register_rejects_duplicates_and_bad_input(client):
    ok = {"name": "Ana", "email": "ana@example.com", "password": "segredo123"}
    assert client.post("/api/auth/register", json=ok).status_code == 201

    r = client.post("/api/auth/register", json={**ok, "email": "ANA@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "email_taken"

    r = client.post("/api/auth/register", json={**ok, "email": "b@example.com", "password": "123"})
    assert r.json()["detail"] == "password_too_short"
    r = client.post("/api/auth/register", json={**ok, "email": "no-at-sign"})
    assert r.json()["detail"] == "invalid_email"
    r = client.post("/api/auth/register", json={**ok, "email": "c@example.com", "name": "  "})
    assert r.json()["detail"] == "name_required"


def test_login_wrong_password(client, make_user):
    make_user()
    r = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "errada"})
    assert r.status_code == 401
    assert r.json()["detail"] == "invalid_credentials"
    r = client.post("/api/auth/login", json={"email": "ninguem@example.com", "password": "errada"})
    assert r.status_code == 401


def test_expired_token_is_rejected(client, make_user):
    _, headers = make_user()
    old = (dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=2)).isoformat()
    with get_conn() as conn:
        conn.execute("UPDATE auth_token SET created_at=?", (old,))
    with patch("parnaso.services.auth_svc.get_config", return_value={"token_ttl_hours": 1}):
        assert client.get("/api/auth/me", headers=headers).status_code == 401
    with get_conn() as conn:
        assert conn.execute("SELECT COUNT(1) AS c FROM auth_token").fetchone()["c"] == 0


def test_admin_emails_from_config_yaml(client, tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("admin_emails:\n  - Chefe@Example.com\n", encoding="utf-8")
    monkeypatch.setenv("PARNASO_CONFIG", str(cfg))
    r = client.post("/api/auth/register", json={"name": "Chefe", "email": "chefe@example.com", "password": "segredo123"})
    assert r.json()["user"]["role"] == "admin"


def test_request_validation_answers_400(client):
    r = client.post("/api/auth/register", json={"name": "Ana", "email": "ana@example.com"})
    assert r.status_code == 400
    assert any(err["loc"][-1] == "password" for err in r.json()["detail"])
