from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..domain.models import User
from ..logs import LogContext
from ..services.data_svc import delete_project, list_projects, save_project
from .deps import fail, get_current_user

router = APIRouter()


@router.get("/api/projects")
def api_projects(user: User = Depends(get_current_user)):
    return {"items": list_projects(user.id)}


@router.post("/api/projects/save")
def api_project_save(project: dict = Body(...), user: User = Depends(get_current_user)):
    log = LogContext("SAVE_PROJECT", user.id)
    log.set_payload(project)
    try:
        saved = save_project(user.id, project, log)
        log.write("OK")
        return {"message": "ok", "project": saved, "items": list_projects(user.id)}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/projects/delete")
def api_project_delete(id: str = Body(..., embed=True), user: User = Depends(get_current_user)):
    log = LogContext("DELETE_PROJECT", user.id)
    log.set_payload({"id": id})
    try:
        delete_project(user.id, id, log)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(log, e)
