"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from layout_engine.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_DEPLOYED_URL = "http://localhost:3000"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the course layout service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  port: int
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  pg_dsn: str | None
  pg_connect_timeout: int
  gemini_api_key: str | None
  gemini_model: str
  deployed_url: str
  poller_enabled: bool
  poll_interval_seconds: float
  dispatch_max_attempts: int
  dispatch_backoff_ms: int
  dispatch_timeout_seconds: float
  max_chapters: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  origins = [origin.strip() for origin in (raw or DEFAULT_DEPLOYED_URL).split(",") if origin.strip()]

  if not origins:
    raise ValueError("LAYOUT_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("LAYOUT_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None or raw.strip() == "":
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _positive_float(name: str, default: str) -> float:
  value = float(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive number.")
  return value


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("LAYOUT_ENV", "development").lower()

  # Toggle SQL echo and verbose diagnostics in non-production environments.
  debug = _parse_bool(os.getenv("LAYOUT_DEBUG"))

  log_backup_count = int(os.getenv("LAYOUT_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("LAYOUT_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # DEPLOYED_URL is honoured so existing deployments keep dispatching to the same host.
  deployed_url = _optional_str(os.getenv("LAYOUT_DEPLOYED_URL")) or _optional_str(os.getenv("DEPLOYED_URL")) or DEFAULT_DEPLOYED_URL

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("LAYOUT_ALLOWED_ORIGINS")),
    port=_positive_int("PORT", "3000"),
    log_dir=(os.getenv("LAYOUT_LOG_DIR") or "./logs").strip(),
    log_max_bytes=_positive_int("LAYOUT_LOG_MAX_BYTES", "5242880"),
    log_backup_count=log_backup_count,
    pg_dsn=_optional_str(os.getenv("LAYOUT_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL")),
    pg_connect_timeout=_positive_int("LAYOUT_PG_CONNECT_TIMEOUT", "5"),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    gemini_model=(os.getenv("LAYOUT_GEMINI_MODEL") or "gemini-2.0-flash").strip(),
    deployed_url=deployed_url.rstrip("/"),
    poller_enabled=_parse_bool(os.getenv("LAYOUT_POLLER_ENABLED"), default=True),
    poll_interval_seconds=_positive_float("LAYOUT_POLL_INTERVAL_SECONDS", "60"),
    dispatch_max_attempts=_positive_int("LAYOUT_DISPATCH_MAX_ATTEMPTS", "5"),
    dispatch_backoff_ms=_positive_int("LAYOUT_DISPATCH_BACKOFF_MS", "2000"),
    dispatch_timeout_seconds=_positive_float("LAYOUT_DISPATCH_TIMEOUT_SECONDS", "1800"),
    max_chapters=_positive_int("LAYOUT_MAX_CHAPTERS", "25"),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration like CORS."""
  # Keep database configuration isolated so migrations don't require unrelated env vars.
  debug = _parse_bool(os.getenv("LAYOUT_DEBUG"))
  pg_connect_timeout = _positive_int("LAYOUT_PG_CONNECT_TIMEOUT", "5")
  pg_dsn = _optional_str(os.getenv("LAYOUT_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))

  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)
