from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain.models import User
from ..logs import LogContext
from ..services.auth_svc import current_user
from ..services.remote_store import StorageNotConfigured

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def get_token(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=401, detail="not_authenticated")
    return creds.credentials


def get_current_user(token: str = Depends(get_token)) -> User:
    user = current_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="invalid_token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="admin_only")
    return user


def fail(log: LogContext, e: Exception) -> HTTPException:
    """Write the audit row for a failed call and map the error to an HTTP status."""
    if isinstance(e, HTTPException):
        log.write("ERROR", str(e.detail))
        return e
    if isinstance(e, PermissionError):
        log.write("ERROR", str(e))
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, LookupError):
        log.write("ERROR", str(e))
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValueError):
        log.write("ERROR", str(e))
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, StorageNotConfigured):
        log.write("ERROR", str(e))
        return HTTPException(status_code=503, detail=str(e))
    logger.exception("%s failed", log.action)
    log.write("ERROR", "internal error")
    return HTTPException(status_code=500, detail="internal error")
