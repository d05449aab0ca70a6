from __future__ import annotations

# parnaso/services/utils.py
import datetime as dt


def to_int_safe(x, default=None):
    try: return int(x)
    except (TypeError, ValueError): return default


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def parse_iso_utc(s: str) -> dt.datetime:
    d = dt.datetime.fromisoformat(s.replace("Z", "+00:00"))
    if d.tzinfo is None:
        d = d.replace(tzinfo=dt.timezone.utc)
    return d
