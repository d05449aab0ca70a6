# parnaso/services/config_svc.py
import logging
import sqlite3

from ..db import get_conn
from ..domain.models import UserSettings
from ..logs import LogContext
from .utils import to_int_safe

logger = logging.getLogger(__name__)

DEFAULTS = {
    "default_daily_word_goal": "500",
    "default_weekly_word_goal": "3500",
    # remote | local; env PARNASO_STORAGE and config.yaml take precedence
    "storage_backend": "remote",
    "token_ttl_hours": "720",
}

EDITABLE = set(DEFAULTS)


def ensure_default_config():
    """Insert missing config keys without overwriting existing values."""
    with get_conn() as conn:
        for k, v in DEFAULTS.items():
            conn.execute(
                "INSERT INTO config(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (k, v),
            )
        conn.commit()


def get_config() -> dict:
    try:
        with get_conn() as conn:
            rows = conn.execute("SELECT key, value FROM config").fetchall()
    except sqlite3.Error:
        logger.exception("config table unreadable, using defaults")
        rows = []
    cfg = {r["key"]: r["value"] for r in rows}

    backend = str(cfg.get("storage_backend") or DEFAULTS["storage_backend"]).strip().lower()
    out = {
        "default_daily_word_goal": to_int_safe(cfg.get("default_daily_word_goal"), int(DEFAULTS["default_daily_word_goal"])),
        "default_weekly_word_goal": to_int_safe(cfg.get("default_weekly_word_goal"), int(DEFAULTS["default_weekly_word_goal"])),
        "storage_backend": backend if backend in ("remote", "local") else DEFAULTS["storage_backend"],
        "token_ttl_hours": to_int_safe(cfg.get("token_ttl_hours"), int(DEFAULTS["token_ttl_hours"])),
    }
    return out


def update_config(upd: dict, log: LogContext) -> list[str]:
    unknown = [k for k in upd if k not in EDITABLE]
    if unknown:
        raise ValueError(f"unknown_config_keys: {','.join(sorted(unknown))}")
    if "storage_backend" in upd and str(upd["storage_backend"]).strip().lower() not in ("remote", "local"):
        raise ValueError("storage_backend must be remote or local")
    updated = []
    with get_conn() as conn:
        before = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
        for k, v in upd.items():
            conn.execute(
                "INSERT INTO config(key,value) VALUES(?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (k, str(v).strip())
            )
            updated.append(k)
        conn.commit()
        after = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
    log.set_before(before); log.set_after(after)
    return updated


def initial_settings() -> UserSettings:
    """Settings a user gets before saving their own (INITIAL_SETTINGS)."""
    cfg = get_config()
    return UserSettings(
        daily_word_goal=cfg["default_daily_word_goal"],
        weekly_word_goal=cfg["default_weekly_word_goal"],
    )
