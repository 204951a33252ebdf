"""Application configuration loaded from environment variables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pushrelay.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_PORT = 3000
DEFAULT_SERVICE_ACCOUNT_PATH = "firebase-service-account.json"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the push relay service."""

  environment: str
  host: str
  port: int
  log_level: str
  log_http_4xx: bool
  firebase_project_id: str | None
  firebase_service_account_info: dict[str, Any] | None = field(hash=False, repr=False)
  firebase_service_account_path: str
  supabase_url: str
  supabase_service_role_key: str = field(repr=False)
  feed_schema: str = "public"
  feed_table: str = "notifications"
  profiles_table: str = "profiles"


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_port(raw: str | None) -> int:
  if raw is None or raw.strip() == "":
    return DEFAULT_PORT

  try:
    port = int(raw)
  except ValueError as exc:
    raise ValueError(f"PORT must be an integer, got {raw!r}.") from exc

  if not 0 < port < 65536:
    raise ValueError("PORT must be between 1 and 65535.")

  return port


def _parse_service_account(raw: str | None) -> dict[str, Any] | None:
  """Decode the inline service-account JSON when one is provided."""
  if raw is None or raw.strip() == "":
    return None

  try:
    info = json.loads(raw)
  except json.JSONDecodeError as exc:
    raise ValueError("FIREBASE_SERVICE_ACCOUNT_JSON must be valid JSON.") from exc

  if not isinstance(info, dict):
    raise ValueError("FIREBASE_SERVICE_ACCOUNT_JSON must be a JSON object.")

  return info


def _required_str(name: str) -> str:
  value = _optional_str(os.getenv(name))
  if value is None:
    raise ValueError(f"{name} must be set.")
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

  environment = os.getenv("PUSHRELAY_ENV", "development").lower()
  log_level = (os.getenv("PUSHRELAY_LOG_LEVEL") or "INFO").strip().upper()

  return Settings(
    environment=environment,
    host=(os.getenv("PUSHRELAY_HOST") or "0.0.0.0").strip(),
    port=_parse_port(os.getenv("PORT")),
    log_level=log_level,
    log_http_4xx=_parse_bool(os.getenv("PUSHRELAY_LOG_HTTP_4XX")),
    firebase_project_id=_optional_str(os.getenv("FIREBASE_PROJECT_ID")),
    firebase_service_account_info=_parse_service_account(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")),
    firebase_service_account_path=_optional_str(os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH")) or DEFAULT_SERVICE_ACCOUNT_PATH,
    supabase_url=_required_str("SUPABASE_URL"),
    supabase_service_role_key=_required_str("SUPABASE_SERVICE_ROLE_KEY"),
    feed_schema=_optional_str(os.getenv("PUSHRELAY_FEED_SCHEMA")) or "public",
    feed_table=_optional_str(os.getenv("PUSHRELAY_FEED_TABLE")) or "notifications",
    profiles_table=_optional_str(os.getenv("PUSHRELAY_PROFILES_TABLE")) or "profiles",
  )
