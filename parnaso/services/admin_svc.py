from __future__ import annotations

import pandas as pd

from ..db import get_conn
from ..logs import LogContext
from ..repository import profile_repo, token_repo
from .auth_svc import row_to_user
from .store_svc import get_store


def _matches(user, term: str) -> bool:
    return term in user.name.casefold() or term in user.email.casefold()


def list_users(search: str | None = None) -> list[dict]:
    term = (search or "").strip().casefold()
    with get_conn() as conn:
        users = [row_to_user(r) for r in profile_repo.list_all(conn)]
    if term:
        users = [u for u in users if _matches(u, term)]
    return [u.to_app() for u in users]


def _get_user_row(conn, user_id: str):
    row = profile_repo.get_by_id(conn, user_id)
    if row is None:
        raise LookupError("user_not_found")
    return row


def toggle_user_block(user_id: str, log: LogContext) -> dict:
    with get_conn() as conn:
        row = _get_user_row(conn, user_id)
        if row["role"] == "admin":
            raise ValueError("cannot_block_admin")
        blocked = not bool(row["is_blocked"])
        profile_repo.set_blocked(conn, user_id, blocked)
        if blocked:
            token_repo.delete_for_user(conn, user_id)
        user = row_to_user(profile_repo.get_by_id(conn, user_id))
    log.set_entity("USER", user_id)
    log.set_before({"isBlocked": bool(row["is_blocked"])})
    log.set_after({"isBlocked": user.is_blocked})
    return user.to_app()


def delete_user(user_id: str, acting_user_id: str, log: LogContext):
    """Remove the profile (tokens cascade) and all of the user's stored data in one transaction."""
    if user_id == acting_user_id:
        raise ValueError("cannot_delete_self")
    store = get_store()
    with get_conn() as conn:
        row = _get_user_row(conn, user_id)
        if row["role"] == "admin":
            raise ValueError("cannot_delete_admin")
        before = row_to_user(row).to_app()
        conn.execute("BEGIN")
        try:
            store.delete_user_data(user_id, conn=conn)
            profile_repo.delete_profile(conn, user_id)
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
    log.set_entity("USER", user_id)
    log.set_before(before)


def inspect_user(user_id: str) -> dict:
    with get_conn() as conn:
        user = row_to_user(_get_user_row(conn, user_id))
    return {"user": user.to_app(), **get_store().get_user_data(user_id).to_app()}


def platform_stats(top: int = 10) -> dict:
    """Totals across every user plus a words-written ranking."""
    with get_conn() as conn:
        users = [row_to_user(r) for r in profile_repo.list_all(conn)]
    totals = get_store().user_totals([u.id for u in users])

    df = pd.DataFrame(
        [
            {
                "id": u.id,
                "name": u.name,
                "role": u.role,
                "blocked": u.is_blocked,
                "words": totals.get(u.id, {}).get("words", 0),
                "sessions": totals.get(u.id, {}).get("sessions", 0),
            }
            for u in users
        ],
        columns=["id", "name", "role", "blocked", "words", "sessions"],
    )
    if df.empty:
        return {
            "totalUsers": 0,
            "totalWords": 0,
            "totalSessions": 0,
            "activeUsers": 0,
            "blockedUsers": 0,
            "topWriters": [],
        }

    ranked = df[df["sessions"] > 0].sort_values(["words", "sessions"], ascending=False).head(top)
    # blocked accounts awaiting review; admins are never blocked
    pending = df["blocked"].astype(bool) & (df["role"] != "admin")
    return {
        "totalUsers": int(len(df)),
        "totalWords": int(df["words"].sum()),
        "totalSessions": int(df["sessions"].sum()),
        "activeUsers": int((df["sessions"] > 0).sum()),
        "blockedUsers": int(pending.sum()),
        "topWriters": [
            {"id": r.id, "name": r.name, "words": int(r.words), "sessions": int(r.sessions)}
            for r in ranked.itertuples(index=False)
        ],
    }
