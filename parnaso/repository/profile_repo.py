from __future__ import annotations

from sqlite3 import Connection


_COLS = "id, name, email, role, is_blocked, created_at"


def insert_profile(conn: Connection, user_id: str, name: str, email: str, password_hash: str, role: str = "user"):
    conn.execute(
        "INSERT INTO profiles(id, name, email, password_hash, role, is_blocked) VALUES(?,?,?,?,?,0)",
        (user_id, name, email, password_hash, role),
    )


def get_by_id(conn: Connection, user_id: str):
    return conn.execute(f"SELECT {_COLS} FROM profiles WHERE id=?", (user_id,)).fetchone()


def get_by_email(conn: Connection, email: str):
    return conn.execute(
        f"SELECT {_COLS}, password_hash FROM profiles WHERE email=?", (email,)
    ).fetchone()


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLS} FROM profiles ORDER BY created_at ASC, name ASC").fetchall()


def list_ids(conn: Connection) -> list[str]:
    return [r["id"] for r in conn.execute("SELECT id FROM profiles").fetchall()]


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM profiles").fetchone()["c"])


def set_blocked(conn: Connection, user_id: str, blocked: bool):
    conn.execute("UPDATE profiles SET is_blocked=? WHERE id=?", (1 if blocked else 0, user_id))


def set_role(conn: Connection, user_id: str, role: str):
    conn.execute("UPDATE profiles SET role=? WHERE id=?", (role, user_id))


def delete_profile(conn: Connection, user_id: str) -> int:
    cur = conn.execute("DELETE FROM profiles WHERE id=?", (user_id,))
    return cur.rowcount
