from __future__ import annotations

import datetime as dt
from typing import Any

import pandas as pd

from .store_svc import get_store

_METRIC_COLS = {
    "sessionRating": "averageRating",
    "stressLevel": "averageStress",
    "difficultyLevel": "averageDifficulty",
}


def _mean_or_none(s: pd.Series) -> float | None:
    s = pd.to_numeric(s, errors="coerce").dropna()
    return None if s.empty else round(float(s.mean()), 2)


def _ratio(num: int, den: int) -> float | None:
    return None if den <= 0 else round(num / den, 4)


def compute_streaks(dates: set[dt.date], today: dt.date) -> tuple[int, int]:
    """
    (current, longest) runs of consecutive writing days.
    The current streak counts back from today, or from yesterday when
    nothing has been logged yet today.
    """
    if not dates:
        return 0, 0
    current = 0
    cursor = today if today in dates else today - dt.timedelta(days=1)
    while cursor in dates:
        current += 1
        cursor -= dt.timedelta(days=1)

    longest, run, prev = 0, 0, None
    for d in sorted(dates):
        run = run + 1 if prev is not None and d - prev == dt.timedelta(days=1) else 1
        longest = max(longest, run)
        prev = d
    return current, longest


def user_summary(user_id: str, today: dt.date | None = None, days: int = 7) -> dict[str, Any]:
    today = today or dt.date.today()
    store = get_store()
    data = store.get_user_data(user_id)
    settings = data.settings

    df = pd.DataFrame([s.to_app() for s in data.sessions])
    for col in ("date", "wordCount", "projectId", *_METRIC_COLS):
        if col not in df.columns:
            df[col] = None
    df["wordCount"] = pd.to_numeric(df["wordCount"], errors="coerce").fillna(0).astype(int)
    df["ts"] = pd.to_datetime(df["date"], errors="coerce")

    week_start = today - dt.timedelta(days=today.weekday())
    week_end = week_start + dt.timedelta(days=6)
    words_today = int(df.loc[df["ts"] == pd.Timestamp(today), "wordCount"].sum())
    in_week = (df["ts"] >= pd.Timestamp(week_start)) & (df["ts"] <= pd.Timestamp(week_end))
    words_week = int(df.loc[in_week, "wordCount"].sum())

    dated = df.dropna(subset=["ts"])
    by_day = dated.groupby(dated["ts"].dt.date)["wordCount"].sum()
    recent = []
    for i in range(days - 1, -1, -1):
        d = today - dt.timedelta(days=i)
        recent.append({"date": d.isoformat(), "words": int(by_day.get(d, 0))})

    current, longest = compute_streaks(set(by_day.index), today)

    by_project = df.dropna(subset=["projectId"]).groupby("projectId")["wordCount"].agg(["sum", "count"])
    projects = []
    for p in data.projects:
        words = int(by_project["sum"].get(p.id, 0))
        projects.append({
            "id": p.id,
            "name": p.name,
            "status": p.status,
            "words": words,
            "sessions": int(by_project["count"].get(p.id, 0)),
            "targetWordCount": p.target_word_count,
            "progress": _ratio(words, p.target_word_count),
        })

    out = {
        "totalWords": int(df["wordCount"].sum()),
        "totalSessions": int(len(df)),
        "wordsToday": words_today,
        "wordsThisWeek": words_week,
        "dailyWordGoal": settings.daily_word_goal,
        "weeklyWordGoal": settings.weekly_word_goal,
        "dailyGoalProgress": _ratio(words_today, settings.daily_word_goal),
        "weeklyGoalProgress": _ratio(words_week, settings.weekly_word_goal),
        "currentStreak": current,
        "longestStreak": longest,
        "recentDays": recent,
        "projects": projects,
    }
    for col, name in _METRIC_COLS.items():
        out[name] = _mean_or_none(df[col])
    return out
