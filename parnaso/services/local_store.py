"""
Key-value fallback store, laid out like the browser's localStorage:

    parnaso_<userId>_sessions  -> JSON list of sessions (newest first)
    parnaso_<userId>_projects  -> JSON list of projects
    parnaso_<userId>_settings  -> JSON object

Unreadable values read as empty/default.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from ..db import get_conn
from ..domain.models import Project, UserData, UserSettings, WritingSession
from ..repository import kv_repo
from .config_svc import initial_settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "parnaso_"


def storage_keys(user_id: str) -> dict[str, str]:
    return {
        "sessions": f"{KEY_PREFIX}{user_id}_sessions",
        "projects": f"{KEY_PREFIX}{user_id}_projects",
        "settings": f"{KEY_PREFIX}{user_id}_settings",
    }


def dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class LocalStore:
    mode = "local"

    def is_configured(self) -> bool:
        return True

    def _read(self, key: str) -> Any:
        with get_conn() as conn:
            raw = kv_repo.get_item(conn, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("malformed JSON under %s, treating as empty", key)
            return None

    def _write(self, key: str, value: Any):
        with get_conn() as conn:
            kv_repo.set_item(conn, key, dumps(value))

    def _read_list(self, key: str, model):
        data = self._read(key)
        if not isinstance(data, list):
            return []
        out = []
        for item in data:
            try:
                out.append(model.model_validate(item))
            except ValidationError:
                logger.warning("skipping invalid record under %s", key)
        return out

    # --- sessions ---
    def get_sessions(self, user_id: str) -> list[WritingSession]:
        return self._read_list(storage_keys(user_id)["sessions"], WritingSession)

    def save_session(self, user_id: str, session: WritingSession) -> list[WritingSession]:
        rest = [s for s in self.get_sessions(user_id) if s.id != session.id]
        sessions = [session, *rest]
        self._write(storage_keys(user_id)["sessions"], [s.to_app() for s in sessions])
        return sessions

    def delete_session(self, user_id: str, session_id: str) -> bool:
        sessions = self.get_sessions(user_id)
        kept = [s for s in sessions if s.id != session_id]
        if len(kept) == len(sessions):
            return False
        self._write(storage_keys(user_id)["sessions"], [s.to_app() for s in kept])
        return True

    def clear_sessions(self, user_id: str):
        with get_conn() as conn:
            kv_repo.remove_item(conn, storage_keys(user_id)["sessions"])

    # --- projects ---
    def get_projects(self, user_id: str) -> list[Project]:
        return self._read_list(storage_keys(user_id)["projects"], Project)

    def save_project(self, user_id: str, project: Project) -> list[Project]:
        projects = self.get_projects(user_id)
        for i, p in enumerate(projects):
            if p.id == project.id:
                projects[i] = project
                break
        else:
            projects.append(project)
        self._write(storage_keys(user_id)["projects"], [p.to_app() for p in projects])
        return projects

    def delete_project(self, user_id: str, project_id: str) -> bool:
        keys = storage_keys(user_id)
        projects = self.get_projects(user_id)
        kept = [p for p in projects if p.id != project_id]
        if len(kept) == len(projects):
            return False
        self._write(keys["projects"], [p.to_app() for p in kept])
        sessions = self.get_sessions(user_id)
        if any(s.project_id == project_id for s in sessions):
            detached = [s.model_copy(update={"project_id": None}) if s.project_id == project_id else s for s in sessions]
            self._write(keys["sessions"], [s.to_app() for s in detached])
        return True

    # --- settings ---
    def get_settings(self, user_id: str) -> UserSettings:
        data = self._read(storage_keys(user_id)["settings"])
        if not isinstance(data, dict):
            return initial_settings()
        try:
            return UserSettings.model_validate(data)
        except ValidationError:
            logger.warning("invalid settings for %s, using defaults", user_id)
            return initial_settings()

    def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        self._write(storage_keys(user_id)["settings"], settings.to_app())
        return settings

    # --- whole-user operations ---
    def clear_all_data(self, user_id: str):
        keys = storage_keys(user_id)
        self._write(keys["sessions"], [])
        self._write(keys["projects"], [])
        self._write(keys["settings"], initial_settings().to_app())

    def get_user_data(self, user_id: str) -> UserData:
        return UserData(
            sessions=self.get_sessions(user_id),
            projects=self.get_projects(user_id),
            settings=self.get_settings(user_id),
        )

    def delete_user_data(self, user_id: str, conn=None):
        if conn is None:
            with get_conn() as conn:
                return self.delete_user_data(user_id, conn)
        for key in storage_keys(user_id).values():
            kv_repo.remove_item(conn, key)

    def user_totals(self, user_ids: list[str]) -> dict[str, dict[str, int]]:
        out: dict[str, dict[str, int]] = {}
        for uid in user_ids:
            data = self._read(storage_keys(uid)["sessions"])
            if not isinstance(data, list) or not data:
                continue
            try:
                words = sum(int(s.get("wordCount") or 0) for s in data)
            except (AttributeError, TypeError, ValueError):
                logger.warning("unreadable sessions for %s, skipped in totals", uid)
                continue
            out[uid] = {"words": words, "sessions": len(data)}
        return out

    def global_stats(self, user_ids: list[str]) -> dict[str, int]:
        totals = self.user_totals(user_ids)
        return {
            "totalWords": sum(t["words"] for t in totals.values()),
            "totalSessions": sum(t["sessions"] for t in totals.values()),
        }

    # --- raw key access (backup/restore) ---
    def all_items(self) -> dict[str, str | None]:
        with get_conn() as conn:
            return {r["key"]: r["value"] for r in kv_repo.list_prefix(conn, KEY_PREFIX)}

    def set_raw(self, key: str, value: str):
        with get_conn() as conn:
            kv_repo.set_item(conn, key, value)
