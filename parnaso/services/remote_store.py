"""
Relational store: sessions, projects and settings as rows in
writing_sessions / projects / user_settings.

Reads degrade to empty/default values when the schema is missing or a query
fails; writes raise.
"""
from __future__ import annotations

import logging
import sqlite3

from ..db import get_conn, has_tables
from ..domain.models import Project, UserData, UserSettings, WritingSession
from ..domain.session_mapper import (
    project_to_row,
    row_to_project,
    row_to_session,
    session_to_row,
    settings_to_row,
    row_to_settings,
)
from ..repository import project_repo, session_repo, settings_repo
from .config_svc import initial_settings

logger = logging.getLogger(__name__)


class StorageNotConfigured(RuntimeError):
    pass


class RemoteStore:
    mode = "remote"

    def is_configured(self) -> bool:
        try:
            with get_conn() as conn:
                return has_tables(conn)
        except sqlite3.Error:
            logger.exception("remote store probe failed")
            return False

    def _require(self, conn):
        if not has_tables(conn):
            raise StorageNotConfigured("storage_not_configured")

    # --- sessions ---
    def get_sessions(self, user_id: str) -> list[WritingSession]:
        try:
            with get_conn() as conn:
                if not has_tables(conn):
                    return []
                return [row_to_session(r) for r in session_repo.list_for_user(conn, user_id)]
        except sqlite3.Error:
            logger.exception("get_sessions failed for %s", user_id)
            return []

    def save_session(self, user_id: str, session: WritingSession) -> list[WritingSession]:
        with get_conn() as conn:
            self._require(conn)
            owner = session_repo.get_owner(conn, session.id)
            if owner is not None and owner != user_id:
                raise ValueError("session_id_conflict")
            session_repo.upsert_session(conn, session_to_row(session, user_id))
        return self.get_sessions(user_id)

    def delete_session(self, user_id: str, session_id: str) -> bool:
        with get_conn() as conn:
            self._require(conn)
            return session_repo.delete_one(conn, user_id, session_id) > 0

    def clear_sessions(self, user_id: str):
        with get_conn() as conn:
            self._require(conn)
            session_repo.delete_for_user(conn, user_id)

    # --- projects ---
    def get_projects(self, user_id: str) -> list[Project]:
        try:
            with get_conn() as conn:
                if not has_tables(conn):
                    return []
                return [row_to_project(r) for r in project_repo.list_for_user(conn, user_id)]
        except sqlite3.Error:
            logger.exception("get_projects failed for %s", user_id)
            return []

    def save_project(self, user_id: str, project: Project) -> list[Project]:
        with get_conn() as conn:
            self._require(conn)
            owner = project_repo.get_owner(conn, project.id)
            if owner is not None and owner != user_id:
                raise ValueError("project_id_conflict")
            project_repo.upsert_project(conn, project_to_row(project, user_id))
        return self.get_projects(user_id)

    def delete_project(self, user_id: str, project_id: str) -> bool:
        with get_conn() as conn:
            self._require(conn)
            conn.execute("BEGIN")
            try:
                n = project_repo.delete_one(conn, user_id, project_id)
                if n:
                    session_repo.detach_project(conn, user_id, project_id)
                conn.execute("COMMIT")
            except sqlite3.Error:
                conn.execute("ROLLBACK")
                raise
        return n > 0

    # --- settings ---
    def get_settings(self, user_id: str) -> UserSettings:
        try:
            with get_conn() as conn:
                if not has_tables(conn):
                    return initial_settings()
                row = settings_repo.get_settings(conn, user_id)
        except sqlite3.Error:
            logger.exception("get_settings failed for %s", user_id)
            return initial_settings()
        return initial_settings() if row is None else row_to_settings(row)

    def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        with get_conn() as conn:
            self._require(conn)
            settings_repo.upsert_settings(conn, settings_to_row(settings, user_id))
        return settings

    # --- whole-user operations ---
    def clear_all_data(self, user_id: str):
        defaults = initial_settings()
        with get_conn() as conn:
            self._require(conn)
            conn.execute("BEGIN")
            try:
                session_repo.delete_for_user(conn, user_id)
                project_repo.delete_for_user(conn, user_id)
                settings_repo.upsert_settings(conn, settings_to_row(defaults, user_id))
                conn.execute("COMMIT")
            except sqlite3.Error:
                conn.execute("ROLLBACK")
                raise

    def get_user_data(self, user_id: str) -> UserData:
        return UserData(
            sessions=self.get_sessions(user_id),
            projects=self.get_projects(user_id),
            settings=self.get_settings(user_id),
        )

    def _delete_rows(self, conn, user_id: str):
        session_repo.delete_for_user(conn, user_id)
        project_repo.delete_for_user(conn, user_id)
        settings_repo.delete_for_user(conn, user_id)

    def delete_user_data(self, user_id: str, conn=None):
        """With `conn`, runs inside the caller's transaction."""
        if conn is not None:
            self._require(conn)
            self._delete_rows(conn, user_id)
            return
        with get_conn() as conn:
            self._require(conn)
            conn.execute("BEGIN")
            try:
                self._delete_rows(conn, user_id)
                conn.execute("COMMIT")
            except sqlite3.Error:
                conn.execute("ROLLBACK")
                raise

    def import_sessions(self, user_id: str, sessions: list[WritingSession]):
        """Upsert a whole list atomically; sessions go in oldest first."""
        with get_conn() as conn:
            self._require(conn)
            conn.execute("BEGIN")
            try:
                for session in sessions:
                    owner = session_repo.get_owner(conn, session.id)
                    if owner is not None and owner != user_id:
                        raise ValueError("session_id_conflict")
                    session_repo.upsert_session(conn, session_to_row(session, user_id))
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

    def import_projects(self, user_id: str, projects: list[Project]):
        with get_conn() as conn:
            self._require(conn)
            conn.execute("BEGIN")
            try:
                for project in projects:
                    owner = project_repo.get_owner(conn, project.id)
                    if owner is not None and owner != user_id:
                        raise ValueError("project_id_conflict")
                    project_repo.upsert_project(conn, project_to_row(project, user_id))
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

    def user_totals(self, user_ids: list[str]) -> dict[str, dict[str, int]]:
        """{user_id: {"words": n, "sessions": n}}; users without sessions are omitted."""
        try:
            with get_conn() as conn:
                if not has_tables(conn):
                    return {}
                rows = session_repo.totals_by_user(conn, list(user_ids))
        except sqlite3.Error:
            logger.exception("user_totals failed")
            return {}
        return {r["user_id"]: {"words": int(r["words"]), "sessions": int(r["sessions"])} for r in rows}

    def global_stats(self, user_ids: list[str]) -> dict[str, int]:
        totals = self.user_totals(user_ids)
        return {
            "totalWords": sum(t["words"] for t in totals.values()),
            "totalSessions": sum(t["sessions"] for t in totals.values()),
        }
