from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException

from ..domain.models import User
from ..logs import LogContext
from ..services.admin_svc import delete_user, inspect_user, list_users, platform_stats, toggle_user_block
from .deps import fail, require_admin

router = APIRouter()


@router.get("/api/admin/users")
def api_admin_users(q: str | None = None, admin: User = Depends(require_admin)):
    return {"items": list_users(q)}


@router.post("/api/admin/users/toggle_block")
def api_admin_toggle_block(user_id: str = Body(..., embed=True), admin: User = Depends(require_admin)):
    log = LogContext("TOGGLE_USER_BLOCK", admin.id)
    log.set_payload({"user_id": user_id})
    try:
        user = toggle_user_block(user_id, log)
        log.write("OK")
        return {"message": "ok", "user": user}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/admin/users/delete")
def api_admin_delete_user(user_id: str = Body(..., embed=True), admin: User = Depends(require_admin)):
    log = LogContext("DELETE_USER", admin.id)
    log.set_payload({"user_id": user_id})
    try:
        delete_user(user_id, admin.id, log)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(log, e)


@router.get("/api/admin/users/{user_id}/data")
def api_admin_user_data(user_id: str, admin: User = Depends(require_admin)):
    try:
        return inspect_user(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/admin/stats")
def api_admin_stats(top: int = 10, admin: User = Depends(require_admin)):
    return platform_stats(top)
