"""Tests for settings loaded from the environment."""

from __future__ import annotations

from datetime import time

import pytest
from pydantic import ValidationError

from unrecorded.config import Settings


def test_database_url_is_built_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_USER", "alice")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    monkeypatch.setenv("DB_HOST", "mysql.internal")
    monkeypatch.setenv("DB_PORT", "3307")
    monkeypatch.setenv("DB_NAME", "chat")

    settings = Settings(_env_file=None)

    assert settings.database_url == "mysql+pymysql://alice:pw@mysql.internal:3307/chat"


def test_database_url_override_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///./local.db")

    assert Settings(_env_file=None).database_url == "sqlite+pysqlite:///./local.db"


def test_housekeeping_and_cors_parsing(monkeypatch):
    monkeypatch.setenv("HOUSEKEEPING_RUN_AT", "03:30")
    monkeypatch.setenv("HOUSEKEEPING_ENABLED", "false")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings(_env_file=None)

    assert settings.housekeeping_run_at == time(3, 30)
    assert settings.housekeeping_enabled is False
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_session_ttl_must_be_positive(monkeypatch):
    monkeypatch.setenv("SESSION_TTL_MINUTES", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
