import logging

from boredom_dial.config import Settings
from boredom_dial.logging_config import setup_logging


def test_settings_defaults_without_env(monkeypatch):
    for name in ("HOST", "PORT", "BOTS_ENABLED", "SWEEP_INTERVAL", "ROOM_IDLE_TTL"):
        monkeypatch.delenv(name, raising=False)

    s = Settings(_env_file=None)

    assert s.port == 3001
    assert s.bots_enabled is True
    assert s.sweep_interval == 60.0
    assert s.room_idle_ttl == 3600.0
    assert s.cors_allow_origins == ["*"]


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("BOTS_ENABLED", "false")
    monkeypatch.setenv("ROOM_IDLE_TTL", "120")

    s = Settings(_env_file=None)

    assert s.port == 8080
    assert s.bots_enabled is False
    assert s.room_idle_ttl == 120.0


def test_setup_logging_level(monkeypatch):
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG

        monkeypatch.setenv("LOG_LEVEL", "warning")
        setup_logging()
        assert root.level == logging.WARNING

        setup_logging("nonsense")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
