from __future__ import annotations

from sqlite3 import Connection


def upsert_session(conn: Connection, row: dict):
    """Insert or overwrite by id (last write wins); insertion order (seq) is kept."""
    conn.execute(
        "INSERT INTO writing_sessions(id, user_id, project_id, date, word_count, data) "
        "VALUES(:id, :user_id, :project_id, :date, :word_count, :data) "
        "ON CONFLICT(id) DO UPDATE SET "
        "project_id=excluded.project_id, date=excluded.date, "
        "word_count=excluded.word_count, data=excluded.data "
        "WHERE writing_sessions.user_id=excluded.user_id",
        row,
    )


def list_for_user(conn: Connection, user_id: str):
    return conn.execute(
        "SELECT id, user_id, project_id, date, word_count, data FROM writing_sessions "
        "WHERE user_id=? ORDER BY date DESC, seq DESC",
        (user_id,),
    ).fetchall()


def get_owner(conn: Connection, session_id: str) -> str | None:
    row = conn.execute("SELECT user_id FROM writing_sessions WHERE id=?", (session_id,)).fetchone()
    return None if row is None else row["user_id"]


def delete_one(conn: Connection, user_id: str, session_id: str) -> int:
    return conn.execute(
        "DELETE FROM writing_sessions WHERE user_id=? AND id=?", (user_id, session_id)
    ).rowcount


def delete_for_user(conn: Connection, user_id: str) -> int:
    return conn.execute("DELETE FROM writing_sessions WHERE user_id=?", (user_id,)).rowcount


def detach_project(conn: Connection, user_id: str, project_id: str) -> int:
    return conn.execute(
        "UPDATE writing_sessions SET project_id=NULL WHERE user_id=? AND project_id=?",
        (user_id, project_id),
    ).rowcount


def totals_by_user(conn: Connection, user_ids: list[str]):
    if not user_ids:
        return []
    placeholders = ",".join(["?"] * len(user_ids))
    return conn.execute(
        "SELECT user_id, COUNT(1) AS sessions, COALESCE(SUM(word_count), 0) AS words "
        f"FROM writing_sessions WHERE user_id IN ({placeholders}) GROUP BY user_id",
        tuple(user_ids),
    ).fetchall()
