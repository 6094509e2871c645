"""Configuration module for the negotiation engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from app.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    DB_CREATE_ALL: bool
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str
    NEGOTIATION_MAX_RETRIES: int
    NEGOTIATION_TIMEOUT_SECONDS: float
    NEGOTIATION_RETRY_BACKOFF_SECONDS: float
    KNOWLEDGE_CACHE_TTL_SECONDS: float
    DEBTOR_CACHE_TTL_SECONDS: float
    METRICS_CACHE_TTL_SECONDS: float
    REJECT_CONCURRENT_TURNS: bool

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))

    config = Config(
        APP_NAME="negotiation-engine",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./negotiation.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        DB_CREATE_ALL=_as_bool(os.getenv("DB_CREATE_ALL"), default=(resolved_env != "production")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
        NEGOTIATION_MAX_RETRIES=int(os.getenv("NEGOTIATION_MAX_RETRIES", "3")),
        NEGOTIATION_TIMEOUT_SECONDS=float(os.getenv("NEGOTIATION_TIMEOUT_SECONDS", "30")),
        NEGOTIATION_RETRY_BACKOFF_SECONDS=float(os.getenv("NEGOTIATION_RETRY_BACKOFF_SECONDS", "0.25")),
        KNOWLEDGE_CACHE_TTL_SECONDS=float(os.getenv("KNOWLEDGE_CACHE_TTL_SECONDS", "300")),
        DEBTOR_CACHE_TTL_SECONDS=float(os.getenv("DEBTOR_CACHE_TTL_SECONDS", "0")),
        METRICS_CACHE_TTL_SECONDS=float(os.getenv("METRICS_CACHE_TTL_SECONDS", "300")),
        REJECT_CONCURRENT_TURNS=_as_bool(os.getenv("REJECT_CONCURRENT_TURNS")),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.NEGOTIATION_MAX_RETRIES < 0:
        raise ConfigurationError("NEGOTIATION_MAX_RETRIES must be >= 0.")
    if config.NEGOTIATION_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("NEGOTIATION_TIMEOUT_SECONDS must be > 0.")
    if config.NEGOTIATION_RETRY_BACKOFF_SECONDS < 0:
        raise ConfigurationError("NEGOTIATION_RETRY_BACKOFF_SECONDS must be >= 0.")
    if config.KNOWLEDGE_CACHE_TTL_SECONDS < 0 or config.METRICS_CACHE_TTL_SECONDS < 0:
        raise ConfigurationError("Cache TTL values must be >= 0.")
    if config.DEBTOR_CACHE_TTL_SECONDS < 0:
        raise ConfigurationError("DEBTOR_CACHE_TTL_SECONDS must be >= 0.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
