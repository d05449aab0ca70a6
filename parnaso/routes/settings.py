from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..domain.models import User
from ..logs import LogContext
from ..services.config_svc import get_config, update_config
from ..services.data_svc import get_settings, reset_all, update_settings
from ..services.stats_svc import user_summary
from ..services.store_svc import storage_status
from .deps import fail, get_current_user, require_admin

router = APIRouter()


class SettingsUpdateBody(BaseModel):
    dailyWordGoal: int | None = None
    weeklyWordGoal: int | None = None


class ConfigUpdateBody(BaseModel):
    updates: dict


@router.get("/api/settings/get")
def api_settings_get(user: User = Depends(get_current_user)):
    return get_settings(user.id)


@router.post("/api/settings/update")
def api_settings_update(body: SettingsUpdateBody, user: User = Depends(get_current_user)):
    log = LogContext("SETTINGS_UPDATE", user.id)
    upd = body.model_dump(exclude_none=True)
    log.set_payload(upd)
    try:
        out = update_settings(user.id, upd, log)
        log.write("OK")
        return {"message": "ok", "settings": out}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/data/reset")
def api_data_reset(user: User = Depends(get_current_user)):
    log = LogContext("RESET_USER_DATA", user.id)
    try:
        out = reset_all(user.id, log)
        log.write("OK")
        return {"message": "ok", **out}
    except Exception as e:
        raise fail(log, e)


@router.get("/api/stats/summary")
def api_stats_summary(
    today: str | None = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    days: int = Query(7, ge=1, le=366),
    user: User = Depends(get_current_user),
):
    try:
        d = dt.date.fromisoformat(today) if today else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user_summary(user.id, d, days)


@router.get("/api/storage/status")
def api_storage_status():
    return storage_status()


@router.get("/api/config/get")
def api_config_get(admin: User = Depends(require_admin)):
    return get_config()


@router.post("/api/config/update")
def api_config_update(body: ConfigUpdateBody, admin: User = Depends(require_admin)):
    log = LogContext("CONFIG_UPDATE", admin.id)
    log.set_payload(body.model_dump())
    try:
        updated_keys = update_config(body.updates, log)
        log.write("OK")
        return {"message": "ok", "updated": updated_keys}
    except Exception as e:
        raise fail(log, e)
