from __future__ import annotations

from sqlite3 import Connection


def insert_token(conn: Connection, token: str, user_id: str, created_at: str):
    conn.execute(
        "INSERT INTO auth_token(token, user_id, created_at) VALUES(?,?,?)",
        (token, user_id, created_at),
    )


def get_token(conn: Connection, token: str):
    return conn.execute(
        "SELECT token, user_id, created_at FROM auth_token WHERE token=?", (token,)
    ).fetchone()


def delete_token(conn: Connection, token: str) -> int:
    return conn.execute("DELETE FROM auth_token WHERE token=?", (token,)).rowcount


def delete_for_user(conn: Connection, user_id: str) -> int:
    return conn.execute("DELETE FROM auth_token WHERE user_id=?", (user_id,)).rowcount
