"""
Relational store over writing_sessions / projects / user_settings.
"""
from __future__ import annotations

import sqlite3
from unittest.mock import patch

import pytest

from parnaso.db import get_conn
from parnaso.domain.models import Project, UserSettings, WritingSession
from parnaso.services.remote_store import RemoteStore, StorageNotConfigured


class TestRemoteStore:

    def setup_method(self):
        self.store = RemoteStore()

    def test_sessions_newest_first(self):
        self.store.save_session("u1", WritingSession(id="a", date="2025-01-01", word_count=1))
        self.store.save_session("u1", WritingSession(id="b", date="2025-01-03", word_count=2))
        self.store.save_session("u1", WritingSession(id="c", date="2025-01-03", word_count=3))
        self.store.save_session("u1", WritingSession(id="d", date="2025-01-02", word_count=4))
        assert [s.id for s in self.store.get_sessions("u1")] == ["c", "b", "d", "a"]

    def test_upsert_is_last_write_wins(self):
        self.store.save_session("u1", WritingSession(id="a", date="2025-01-01", word_count=1, notes="v1"))
        out = self.store.save_session("u1", WritingSession(id="a", date="2025-01-01", word_count=9))
        assert len(out) == 1
        assert out[0].word_count == 9
        assert out[0].notes is None
        with get_conn() as conn:
            assert conn.execute("SELECT COUNT(1) AS c FROM writing_sessions").fetchone()["c"] == 1

    def test_session_id_owned_by_other_user(self):
        self.store.save_session("u1", WritingSession(id="a", date="2025-01-01"))
        with pytest.raises(ValueError, match="session_id_conflict"):
            self.store.save_session("u2", WritingSession(id="a", date="2025-01-01"))

    def test_delete_and_clear_sessions(self):
        self.store.save_session("u1", WritingSession(id="a", date="2025-01-01"))
        self.store.save_session("u1", WritingSession(id="b", date="2025-01-01"))
        self.store.save_session("u2", WritingSession(id="c", date="2025-01-01"))
        assert self.store.delete_session("u1", "a") is True
        assert self.store.delete_session("u1", "c") is False
        self.store.clear_sessions("u1")
        assert self.store.get_sessions("u1") == []
        assert [s.id for s in self.store.get_sessions("u2")] == ["c"]

    def test_projects_keep_creation_order(self):
        self.store.save_project("u1", Project(id="p1", name="A", created_at="2025-01-01T00:00:00+00:00"))
        self.store.save_project("u1", Project(id="p2", name="B", created_at="2025-01-02T00:00:00+00:00"))
        self.store.save_project("u1", Project(id="p1", name="A2", created_at="2025-01-01T00:00:00+00:00"))
        assert [(p.id, p.name) for p in self.store.get_projects("u1")] == [("p1", "A2"), ("p2", "B")]

    def test_settings_default_then_saved(self):
        assert self.store.get_settings("u1") == UserSettings(daily_word_goal=500, weekly_word_goal=3500)
        self.store.save_settings("u1", UserSettings(daily_word_goal=300, weekly_word_goal=2100))
        assert self.store.get_settings("u1").daily_word_goal == 300

    def test_clear_all_data_resets_settings(self):
        self.store.save_session("u1", WritingSession(date="2025-01-01", word_count=5))
        self.store.save_project("u1", Project(name="P"))
        self.store.save_settings("u1", UserSettings(daily_word_goal=1, weekly_word_goal=1))
        self.store.clear_all_data("u1")
        data = self.store.get_user_data("u1")
        assert data.sessions == [] and data.projects == []
        assert data.settings == UserSettings(daily_word_goal=500, weekly_word_goal=3500)

    def test_delete_user_data(self):
        self.store.save_session("u1", WritingSession(date="2025-01-01", word_count=5))
        self.store.save_settings("u1", UserSettings(daily_word_goal=1, weekly_word_goal=1))
        self.store.delete_user_data("u1")
        with get_conn() as conn:
            assert conn.execute("SELECT COUNT(1) AS c FROM user_settings").fetchone()["c"] == 0
        assert self.store.get_sessions("u1") == []

    def test_global_stats(self):
        self.store.save_session("u1", WritingSession(date="2025-01-01", word_count=100))
        self.store.save_session("u1", WritingSession(date="2025-01-02", word_count=20))
        self.store.save_session("u2", WritingSession(date="2025-01-02", word_count=3))
        self.store.save_session("u3", WritingSession(date="2025-01-02", word_count=1000))
        assert self.store.global_stats(["u1", "u2"]) == {"totalWords": 123, "totalSessions": 3}
        assert self.store.global_stats([]) == {"totalWords": 0, "totalSessions": 0}

    def test_reads_degrade_when_schema_missing(self):
        with patch("parnaso.services.remote_store.has_tables", return_value=False):
            assert self.store.is_configured() is False
            assert self.store.get_sessions("u1") == []
            assert self.store.get_projects("u1") == []
            assert self.store.get_settings("u1").daily_word_goal == 500
            with pytest.raises(StorageNotConfigured):
                self.store.save_session("u1", WritingSession(date="2025-01-01"))

    def test_reads_degrade_on_db_error(self):
        with patch("parnaso.repository.session_repo.list_for_user", side_effect=sqlite3.OperationalError("boom")):
            assert self.store.get_sessions("u1") == []
