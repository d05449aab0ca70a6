from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..domain.models import User
from ..logs import LogContext
from ..services.data_svc import clear_sessions, delete_session, list_sessions, save_session
from .deps import fail, get_current_user

router = APIRouter()


@router.get("/api/sessions")
def api_sessions(user: User = Depends(get_current_user)):
    return {"items": list_sessions(user.id)}


@router.post("/api/sessions/save")
def api_session_save(session: dict = Body(...), user: User = Depends(get_current_user)):
    """Upsert one session (camelCase record); returns it plus the fresh list."""
    log = LogContext("SAVE_SESSION", user.id)
    log.set_payload(session)
    try:
        saved = save_session(user.id, session, log)
        log.write("OK")
        return {"message": "ok", "session": saved, "items": list_sessions(user.id)}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/sessions/delete")
def api_session_delete(id: str = Body(..., embed=True), user: User = Depends(get_current_user)):
    log = LogContext("DELETE_SESSION", user.id)
    log.set_payload({"id": id})
    try:
        delete_session(user.id, id, log)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/sessions/clear")
def api_sessions_clear(user: User = Depends(get_current_user)):
    log = LogContext("CLEAR_SESSIONS", user.id)
    try:
        clear_sessions(user.id, log)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(log, e)
