from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from pydantic import ValidationError

from .models import Project, UserSettings, WritingSession

logger = logging.getLogger(__name__)

# Session attributes stored as typed columns; everything else goes to the JSON blob.
SESSION_COLUMNS = {"id": "id", "project_id": "projectId", "date": "date", "word_count": "wordCount"}


def session_to_row(session: WritingSession, user_id: str) -> dict[str, Any]:
    """
    Split a session into typed columns plus a JSON blob.

    The blob carries the self-report fields (camelCase keys, None dropped);
    it is None when there is nothing beyond the typed columns.
    """
    app = session.to_app()
    bag = {k: v for k, v in app.items() if k not in SESSION_COLUMNS.values()}
    return {
        "id": session.id,
        "user_id": user_id,
        "project_id": session.project_id,
        "date": session.date,
        "word_count": int(session.word_count),
        "data": json.dumps(bag, ensure_ascii=False, sort_keys=True) if bag else None,
    }


def _load_blob(raw: str | None, session_id: str) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        bag = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("malformed session blob for %s, ignoring extra fields", session_id)
        return {}
    if not isinstance(bag, dict):
        logger.warning("session blob for %s is not an object, ignoring", session_id)
        return {}
    return bag


def row_to_session(row: Mapping[str, Any]) -> WritingSession:
    bag = _load_blob(row["data"], row["id"])
    # typed columns win over anything duplicated in the blob
    for col in SESSION_COLUMNS.values():
        bag.pop(col, None)
    base = {
        "id": row["id"],
        "projectId": row["project_id"],
        "date": row["date"],
        "wordCount": int(row["word_count"] or 0),
    }
    try:
        return WritingSession.model_validate({**bag, **base})
    except ValidationError:
        logger.warning("session %s has invalid self-report fields, keeping typed columns only", row["id"])
        return WritingSession.model_validate(base)


def project_to_row(project: Project, user_id: str) -> dict[str, Any]:
    return {
        "id": project.id,
        "user_id": user_id,
        "name": project.name,
        "description": project.description,
        "target_word_count": int(project.target_word_count),
        "color": project.color,
        "status": project.status,
        "created_at": project.created_at,
    }


def row_to_project(row: Mapping[str, Any]) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        target_word_count=int(row["target_word_count"] or 0),
        color=row["color"],
        status=row["status"],
        created_at=row["created_at"],
    )


def settings_to_row(settings: UserSettings, user_id: str) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "daily_word_goal": int(settings.daily_word_goal),
        "weekly_word_goal": int(settings.weekly_word_goal),
    }


def row_to_settings(row: Mapping[str, Any]) -> UserSettings:
    return UserSettings(
        daily_word_goal=int(row["daily_word_goal"]),
        weekly_word_goal=int(row["weekly_word_goal"]),
    )
