"""
Storage mode resolution: env > config.yaml > config table > remote.
"""
from __future__ import annotations

from parnaso.logs import LogContext
from parnaso.services.config_svc import update_config
from parnaso.services.local_store import LocalStore
from parnaso.services.remote_store import RemoteStore
from parnaso.services.store_svc import get_store, storage_mode, storage_status


def _yaml(tmp_path, monkeypatch, text):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(text, encoding="utf-8")
    monkeypatch.setenv("PARNASO_CONFIG", str(cfg))


def test_defaults_to_remote():
    assert storage_mode() == "remote"
    assert isinstance(get_store(), RemoteStore)
    assert storage_status() == {"mode": "remote", "configured": True}


def test_config_table_row():
    update_config({"storage_backend": "local"}, LogContext("UPDATE_CONFIG", "test"))
    assert storage_mode() == "local"
    assert isinstance(get_store(), LocalStore)


def test_config_yaml_wins_over_config_table(tmp_path, monkeypatch):
    update_config({"storage_backend": "remote"}, LogContext("UPDATE_CONFIG", "test"))
    _yaml(tmp_path, monkeypatch, "storage: local\n")
    assert storage_mode() == "local"


def test_env_wins_over_config_yaml(tmp_path, monkeypatch):
    _yaml(tmp_path, monkeypatch, "storage: local\n")
    monkeypatch.setenv("PARNASO_STORAGE", "REMOTE")
    assert storage_mode() == "remote"


def test_unknown_values_fall_through(tmp_path, monkeypatch):
    _yaml(tmp_path, monkeypatch, "storage: cloud\n")
    monkeypatch.setenv("PARNASO_STORAGE", "s3")
    update_config({"storage_backend": "local"}, LogContext("UPDATE_CONFIG", "test"))
    assert storage_mode() == "local"
