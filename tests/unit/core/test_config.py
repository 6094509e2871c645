from __future__ import annotations

import pytest

from app.core.config import _build_config
from app.core.exceptions import ConfigurationError


def test_defaults_for_development(monkeypatch):
    for key in ("DATABASE_URL", "NEGOTIATION_TIMEOUT_SECONDS", "NEGOTIATION_MAX_RETRIES", "DB_CREATE_ALL"):
        monkeypatch.delenv(key, raising=False)
    config = _build_config("development")
    assert config.DATABASE_URL.startswith("sqlite")
    assert config.NEGOTIATION_TIMEOUT_SECONDS == 30
    assert config.NEGOTIATION_MAX_RETRIES == 3
    assert config.DB_CREATE_ALL is True
    assert config.is_production is False


def test_production_disables_debug_and_create_all(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.delenv("DB_CREATE_ALL", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:secret@db:5432/negotiation")
    config = _build_config("production")
    assert config.DEBUG is False
    assert config.DB_CREATE_ALL is False
    assert config.DB_CONNECTIVITY_REQUIRED is True


def test_unsupported_database_url_is_rejected(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "mysql://user@host/db")
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_non_positive_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("NEGOTIATION_TIMEOUT_SECONDS", "0")
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_placeholder_production_credentials_are_rejected(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:change_me@db:5432/negotiation")
    with pytest.raises(ConfigurationError):
        _build_config("production")
