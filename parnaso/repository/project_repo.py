from __future__ import annotations

from sqlite3 import Connection


def upsert_project(conn: Connection, row: dict):
    conn.execute(
        "INSERT INTO projects(id, user_id, name, description, target_word_count, color, status, created_at) "
        "VALUES(:id, :user_id, :name, :description, :target_word_count, :color, :status, :created_at) "
        "ON CONFLICT(id) DO UPDATE SET "
        "name=excluded.name, description=excluded.description, "
        "target_word_count=excluded.target_word_count, color=excluded.color, status=excluded.status "
        "WHERE projects.user_id=excluded.user_id",
        row,
    )


def list_for_user(conn: Connection, user_id: str):
    return conn.execute(
        "SELECT id, user_id, name, description, target_word_count, color, status, created_at "
        "FROM projects WHERE user_id=? ORDER BY created_at ASC, rowid ASC",
        (user_id,),
    ).fetchall()


def get_owner(conn: Connection, project_id: str) -> str | None:
    row = conn.execute("SELECT user_id FROM projects WHERE id=?", (project_id,)).fetchone()
    return None if row is None else row["user_id"]


def delete_one(conn: Connection, user_id: str, project_id: str) -> int:
    return conn.execute(
        "DELETE FROM projects WHERE user_id=? AND id=?", (user_id, project_id)
    ).rowcount


def delete_for_user(conn: Connection, user_id: str) -> int:
    return conn.execute("DELETE FROM projects WHERE user_id=?", (user_id,)).rowcount
