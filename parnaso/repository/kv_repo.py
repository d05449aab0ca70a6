from __future__ import annotations

from sqlite3 import Connection


def get_item(conn: Connection, key: str) -> str | None:
    row = conn.execute("SELECT value FROM local_storage WHERE key=?", (key,)).fetchone()
    return None if row is None else row["value"]


def set_item(conn: Connection, key: str, value: str | None):
    conn.execute(
        "INSERT INTO local_storage(key, value) VALUES(?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
        (key, value),
    )


def remove_item(conn: Connection, key: str):
    conn.execute("DELETE FROM local_storage WHERE key=?", (key,))


def list_prefix(conn: Connection, prefix: str):
    # escape LIKE wildcards so keys are matched literally
    esc = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return conn.execute(
        "SELECT key, value FROM local_storage WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
        (esc + "%",),
    ).fetchall()
