from __future__ import annotations

import os

from ..db import read_config_yaml
from .config_svc import get_config
from .local_store import LocalStore
from .remote_store import RemoteStore

_MODES = ("remote", "local")


def storage_mode() -> str:
    """env PARNASO_STORAGE > config.yaml `storage` > config table > remote."""
    env = (os.environ.get("PARNASO_STORAGE") or "").strip().lower()
    if env in _MODES:
        return env
    yml = (read_config_yaml().get("storage") or "").lower()
    if yml in _MODES:
        return yml
    return get_config()["storage_backend"]


def get_store(mode: str | None = None) -> RemoteStore | LocalStore:
    mode = mode or storage_mode()
    if mode == "local":
        return LocalStore()
    return RemoteStore()


def storage_status() -> dict:
    store = get_store()
    return {"mode": store.mode, "configured": store.is_configured()}
