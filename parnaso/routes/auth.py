from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..domain.models import User
from ..logs import LogContext
from ..services.auth_svc import login, logout, register
from .deps import fail, get_current_user, get_token

router = APIRouter()


class RegisterBody(BaseModel):
    name: str
    email: str
    password: str


class LoginBody(BaseModel):
    email: str
    password: str


@router.post("/api/auth/register", status_code=201)
def api_register(body: RegisterBody):
    log = LogContext("REGISTER")
    log.set_payload(body.model_dump())
    try:
        user = register(body.name, body.email, body.password, log)
        log.write("OK")
        return {"message": "ok", "user": user}
    except Exception as e:
        raise fail(log, e)


@router.post("/api/auth/login")
def api_login(body: LoginBody):
    log = LogContext("LOGIN")
    log.set_payload(body.model_dump())
    try:
        out = login(body.email, body.password, log)
        log.write("OK")
        return {"message": "ok", **out}
    except PermissionError as e:
        log.write("ERROR", str(e))
        code = 403 if str(e) == "account_blocked" else 401
        raise HTTPException(status_code=code, detail=str(e))
    except Exception as e:
        raise fail(log, e)


@router.post("/api/auth/logout")
def api_logout(token: str = Depends(get_token)):
    logout(token)
    return {"message": "ok"}


@router.get("/api/auth/me")
def api_me(user: User = Depends(get_current_user)):
    return user.to_app()
