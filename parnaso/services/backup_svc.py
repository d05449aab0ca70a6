"""
Backup JSON: a flat object mapping storage keys (parnaso_*) to their
serialized string values, the same shape in both storage modes.
"""
from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from ..db import get_conn
from ..domain.models import Project, UserSettings, WritingSession
from ..logs import LogContext
from ..repository import profile_repo
from .local_store import KEY_PREFIX, LocalStore, dumps, storage_keys
from .store_svc import get_store

logger = logging.getLogger(__name__)

_USER_KEY = re.compile(r"^parnaso_(?P<uid>.+)_(?P<kind>sessions|projects|settings)$")


def export_items() -> dict[str, str | None]:
    store = get_store()
    if isinstance(store, LocalStore):
        return store.all_items()
    with get_conn() as conn:
        user_ids = profile_repo.list_ids(conn)
    out: dict[str, str | None] = {}
    for uid in sorted(user_ids):
        data = store.get_user_data(uid).to_app()
        keys = storage_keys(uid)
        out[keys["sessions"]] = dumps(data["sessions"])
        out[keys["projects"]] = dumps(data["projects"])
        out[keys["settings"]] = dumps(data["settings"])
    return out


def export_backup() -> str:
    return json.dumps(export_items(), ensure_ascii=False, indent=2)


def _decode(value):
    if isinstance(value, str):
        return json.loads(value)
    return value


def _import_remote(store, key: str, value) -> bool:
    m = _USER_KEY.match(key)
    if not m:
        logger.info("backup key %s has no relational counterpart, skipped", key)
        return False
    uid, kind = m.group("uid"), m.group("kind")
    try:
        decoded = _decode(value)
        if kind == "settings":
            store.save_settings(uid, UserSettings.model_validate(decoded))
            return True
        if not isinstance(decoded, list):
            raise ValueError("expected a list")
        # the whole list validates before anything is written
        if kind == "projects":
            store.import_projects(uid, [Project.model_validate(item) for item in decoded])
        else:
            # list is newest first; insert oldest first so ordering survives
            sessions = [WritingSession.model_validate(item) for item in decoded]
            store.import_sessions(uid, sessions[::-1])
        return True
    except (ValueError, ValidationError) as e:
        logger.warning("backup value under %s rejected: %s", key, e)
        return False


def import_backup(json_text: str, log: LogContext | None = None) -> int:
    """Write every parnaso_* key into the active store; returns how many were imported."""
    try:
        data = json.loads(json_text)
    except (TypeError, ValueError):
        logger.error("backup import failed: not valid JSON")
        return 0
    if not isinstance(data, dict):
        logger.error("backup import failed: top level is not an object")
        return 0

    store = get_store()
    count = 0
    for key, value in data.items():
        if not isinstance(key, str) or not key.startswith(KEY_PREFIX):
            continue
        if isinstance(store, LocalStore):
            store.set_raw(key, value if isinstance(value, str) or value is None else dumps(value))
            count += 1
        elif _import_remote(store, key, value):
            count += 1
    if log is not None:
        log.set_after({"imported": count, "mode": store.mode})
    return count
