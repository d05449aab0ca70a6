from __future__ import annotations

from sqlite3 import Connection


def get_settings(conn: Connection, user_id: str):
    return conn.execute(
        "SELECT daily_word_goal, weekly_word_goal FROM user_settings WHERE user_id=?",
        (user_id,),
    ).fetchone()


def upsert_settings(conn: Connection, row: dict):
    conn.execute(
        "INSERT INTO user_settings(user_id, daily_word_goal, weekly_word_goal) "
        "VALUES(:user_id, :daily_word_goal, :weekly_word_goal) "
        "ON CONFLICT(user_id) DO UPDATE SET "
        "daily_word_goal=excluded.daily_word_goal, weekly_word_goal=excluded.weekly_word_goal, "
        "updated_at=datetime('now')",
        row,
    )


def delete_for_user(conn: Connection, user_id: str) -> int:
    return conn.execute("DELETE FROM user_settings WHERE user_id=?", (user_id,)).rowcount
