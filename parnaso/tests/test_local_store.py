"""
Key-value fallback store (parnaso_<userId>_* keys).
"""
from __future__ import annotations

import json

from parnaso.db import get_conn
from parnaso.domain.models import Project, UserSettings, WritingSession
from parnaso.repository import kv_repo
from parnaso.services.local_store import LocalStore, storage_keys


def _raw(key):
    with get_conn() as conn:
        return kv_repo.get_item(conn, key)


def _put(key, value):
    with get_conn() as conn:
        kv_repo.set_item(conn, key, value)


def test_storage_keys_scheme():
    assert storage_keys("abc") == {
        "sessions": "parnaso_abc_sessions",
        "projects": "parnaso_abc_projects",
        "settings": "parnaso_abc_settings",
    }


def test_save_session_prepends_and_replaces_same_id():
    store = LocalStore()
    store.save_session("u1", WritingSession(id="a", date="2025-01-01", word_count=100))
    store.save_session("u1", WritingSession(id="b", date="2025-01-02", word_count=200))
    assert [s.id for s in store.get_sessions("u1")] == ["b", "a"]

    store.save_session("u1", WritingSession(id="a", date="2025-01-01", word_count=150))
    sessions = store.get_sessions("u1")
    assert [s.id for s in sessions] == ["a", "b"]
    assert sessions[0].word_count == 150

    stored = json.loads(_raw("parnaso_u1_sessions"))
    assert stored[0] == {"id": "a", "date": "2025-01-01", "wordCount": 150}


def test_save_project_updates_in_place_or_appends():
    store = LocalStore()
    store.save_project("u1", Project(id="p1", name="Um"))
    store.save_project("u1", Project(id="p2", name="Dois"))
    store.save_project("u1", Project(id="p1", name="Um (rev)"))
    assert [(p.id, p.name) for p in store.get_projects("u1")] == [("p1", "Um (rev)"), ("p2", "Dois")]


def test_malformed_json_reads_as_empty_or_default():
    _put("parnaso_u1_sessions", "{oops")
    _put("parnaso_u1_projects", '"a string"')
    _put("parnaso_u1_settings", "[]")
    store = LocalStore()
    assert store.get_sessions("u1") == []
    assert store.get_projects("u1") == []
    assert store.get_settings("u1") == UserSettings(daily_word_goal=500, weekly_word_goal=3500)


def test_invalid_records_are_skipped():
    _put("parnaso_u1_sessions", json.dumps([
        {"id": "ok", "date": "2025-01-01", "wordCount": 10},
        {"id": "bad", "date": "not-a-date"},
    ]))
    assert [s.id for s in LocalStore().get_sessions("u1")] == ["ok"]


def test_clear_all_data_writes_empty_lists_and_default_settings():
    store = LocalStore()
    store.save_session("u1", WritingSession(date="2025-01-01", word_count=10))
    store.save_project("u1", Project(name="X"))
    store.save_settings("u1", UserSettings(daily_word_goal=1, weekly_word_goal=2))

    store.clear_all_data("u1")
    assert json.loads(_raw("parnaso_u1_sessions")) == []
    assert json.loads(_raw("parnaso_u1_projects")) == []
    assert json.loads(_raw("parnaso_u1_settings")) == {"dailyWordGoal": 500, "weeklyWordGoal": 3500}


def test_delete_user_data_removes_keys():
    store = LocalStore()
    store.save_session("u1", WritingSession(date="2025-01-01", word_count=10))
    store.save_settings("u1", UserSettings(daily_word_goal=1, weekly_word_goal=2))
    store.delete_user_data("u1")
    assert _raw("parnaso_u1_sessions") is None
    assert _raw("parnaso_u1_settings") is None
    assert store.get_user_data("u1").sessions == []


def test_global_stats_sums_words_and_skips_malformed_users():
    store = LocalStore()
    store.save_session("u1", WritingSession(date="2025-01-01", word_count=100))
    store.save_session("u1", WritingSession(date="2025-01-02", word_count=250))
    store.save_session("u2", WritingSession(date="2025-01-02", word_count=50))
    _put("parnaso_u3_sessions", "garbage")

    assert store.global_stats(["u1", "u2", "u3", "nobody"]) == {"totalWords": 400, "totalSessions": 3}


def test_delete_project_detaches_sessions():
    store = LocalStore()
    store.save_project("u1", Project(id="p1", name="X"))
    store.save_session("u1", WritingSession(id="s1", date="2025-01-01", project_id="p1"))
    assert store.delete_project("u1", "p1") is True
    assert store.get_sessions("u1")[0].project_id is None
    assert store.delete_project("u1", "p1") is False


def test_api_uses_local_store_when_selected(client, make_user, local_mode):
    user, headers = make_user()
    r = client.post("/api/sessions/save", json={"id": "s1", "date": "2025-01-01", "wordCount": 42}, headers=headers)
    assert r.status_code == 200, r.text
    assert client.get("/api/storage/status").json()["mode"] == "local"
    assert json.loads(_raw(f"parnaso_{user['id']}_sessions"))[0]["wordCount"] == 42
    with get_conn() as conn:
        assert conn.execute("SELECT COUNT(1) AS c FROM writing_sessions").fetchone()["c"] == 0
