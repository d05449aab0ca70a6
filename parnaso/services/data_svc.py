from __future__ import annotations

from ..domain.models import Project, UserSettings, WritingSession
from ..logs import LogContext
from .store_svc import get_store


# ===== Sessions =====
def list_sessions(user_id: str) -> list[dict]:
    return [s.to_app() for s in get_store().get_sessions(user_id)]


def save_session(user_id: str, data: dict, log: LogContext) -> dict:
    """Validate and upsert a session; returns the stored record."""
    session = WritingSession.model_validate(data)
    store = get_store()
    if session.project_id and session.project_id not in {p.id for p in store.get_projects(user_id)}:
        raise ValueError("project_not_found")
    before = next((s.to_app() for s in store.get_sessions(user_id) if s.id == session.id), None)
    store.save_session(user_id, session)
    after = session.to_app()
    log.set_entity("SESSION", session.id)
    log.set_before(before)
    log.set_after(after)
    return after


def delete_session(user_id: str, session_id: str, log: LogContext):
    log.set_entity("SESSION", session_id)
    if not get_store().delete_session(user_id, session_id):
        raise LookupError("session_not_found")


def clear_sessions(user_id: str, log: LogContext):
    store = get_store()
    log.set_before({"count": len(store.get_sessions(user_id))})
    store.clear_sessions(user_id)


# ===== Projects =====
def list_projects(user_id: str) -> list[dict]:
    return [p.to_app() for p in get_store().get_projects(user_id)]


def save_project(user_id: str, data: dict, log: LogContext) -> dict:
    project = Project.model_validate(data)
    store = get_store()
    before = next((p for p in store.get_projects(user_id) if p.id == project.id), None)
    if before is not None and "createdAt" not in data and "created_at" not in data:
        # updates keep the original creation time unless one is sent
        project = project.model_copy(update={"created_at": before.created_at})
    store.save_project(user_id, project)
    after = project.to_app()
    log.set_entity("PROJECT", project.id)
    log.set_before(None if before is None else before.to_app())
    log.set_after(after)
    return after


def delete_project(user_id: str, project_id: str, log: LogContext):
    log.set_entity("PROJECT", project_id)
    if not get_store().delete_project(user_id, project_id):
        raise LookupError("project_not_found")


# ===== Settings =====
def get_settings(user_id: str) -> dict:
    return get_store().get_settings(user_id).to_app()


def update_settings(user_id: str, data: dict, log: LogContext) -> dict:
    store = get_store()
    before = store.get_settings(user_id).to_app()
    settings = UserSettings.model_validate({**before, **data})
    store.save_settings(user_id, settings)
    after = settings.to_app()
    log.set_entity("SETTINGS", user_id)
    log.set_before(before)
    log.set_after(after)
    return after


# ===== Reset =====
def reset_all(user_id: str, log: LogContext) -> dict:
    store = get_store()
    data = store.get_user_data(user_id)
    log.set_entity("USER_DATA", user_id)
    log.set_before({"sessions": len(data.sessions), "projects": len(data.projects)})
    store.clear_all_data(user_id)
    out = store.get_user_data(user_id).to_app()
    log.set_after({"sessions": 0, "projects": 0, "settings": out["settings"]})
    return out
