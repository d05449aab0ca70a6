from __future__ import annotations

import datetime as dt
import secrets
import sqlite3

from werkzeug.security import check_password_hash, generate_password_hash

from ..db import get_conn, read_config_yaml
from ..domain.models import User, new_id, utc_now_iso
from ..logs import LogContext
from ..repository import profile_repo, token_repo
from .config_svc import get_config
from .utils import normalize_email, parse_iso_utc

MIN_PASSWORD_LEN = 6


def row_to_user(row) -> User:
    return User(
        id=row["id"],
        name=row["name"] or "Usuário",
        email=row["email"],
        role=row["role"] if row["role"] in ("admin", "user") else "user",
        is_blocked=bool(row["is_blocked"]),
    )


def register(name: str, email: str, password: str, log: LogContext) -> dict:
    name = (name or "").strip()
    email = normalize_email(email)
    if not name:
        raise ValueError("name_required")
    if "@" not in email:
        raise ValueError("invalid_email")
    if len(password or "") < MIN_PASSWORD_LEN:
        raise ValueError("password_too_short")

    role = "admin" if email in read_config_yaml().get("admin_emails", []) else "user"
    user_id = new_id()
    with get_conn() as conn:
        if profile_repo.get_by_email(conn, email) is not None:
            raise ValueError("email_taken")
        try:
            profile_repo.insert_profile(conn, user_id, name, email, generate_password_hash(password), role)
        except sqlite3.IntegrityError:
            raise ValueError("email_taken")
        user = row_to_user(profile_repo.get_by_id(conn, user_id))
    log.set_user(user_id)
    log.set_entity("USER", user_id)
    log.set_after(user.to_app())
    return user.to_app()


def login(email: str, password: str, log: LogContext) -> dict:
    email = normalize_email(email)
    with get_conn() as conn:
        row = profile_repo.get_by_email(conn, email)
        if row is None or not check_password_hash(row["password_hash"], password or ""):
            raise PermissionError("invalid_credentials")
        if row["is_blocked"]:
            raise PermissionError("account_blocked")
        token = secrets.token_urlsafe(32)
        token_repo.insert_token(conn, token, row["id"], utc_now_iso())
        user = row_to_user(row)
    log.set_user(user.id)
    log.set_entity("USER", user.id)
    return {"token": token, "user": user.to_app()}


def logout(token: str):
    with get_conn() as conn:
        token_repo.delete_token(conn, token)


def current_user(token: str | None) -> User | None:
    """Resolve a bearer token; expired tokens are revoked on sight."""
    if not token:
        return None
    ttl = dt.timedelta(hours=get_config()["token_ttl_hours"])
    with get_conn() as conn:
        tok = token_repo.get_token(conn, token)
        if tok is None:
            return None
        if dt.datetime.now(dt.timezone.utc) - parse_iso_utc(tok["created_at"]) > ttl:
            token_repo.delete_token(conn, token)
            return None
        row = profile_repo.get_by_id(conn, tok["user_id"])
    if row is None:
        return None
    user = row_to_user(row)
    if user.is_blocked:
        return None
    return user


def promote(email: str, log: LogContext) -> dict:
    email = normalize_email(email)
    with get_conn() as conn:
        row = profile_repo.get_by_email(conn, email)
        if row is None:
            raise LookupError("user_not_found")
        profile_repo.set_role(conn, row["id"], "admin")
        user = row_to_user(profile_repo.get_by_id(conn, row["id"]))
    log.set_entity("USER", user.id)
    log.set_before({"role": row["role"]})
    log.set_after({"role": user.role})
    return user.to_app()
