"""Minimal .env loader so local runs pick up Firebase and Supabase credentials."""

from __future__ import annotations

import os
from pathlib import Path


def default_env_path() -> Path:
  """Return the .env path next to the project root."""

  return Path(__file__).resolve().parents[2] / ".env"


def _strip_quotes(value: str) -> str:
  """Drop one pair of matching surrounding quotes."""
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    return value[1:-1]
  return value


def load_env_file(path: Path, *, override: bool = False) -> int:
  """Load key=value pairs from ``path`` into ``os.environ`` and return how many were set."""

  if not path.is_file():
    return 0

  loaded = 0
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue
    if line.startswith("export "):
      line = line[len("export ") :].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
      continue
    # Existing process variables win unless the caller asks otherwise.
    if not override and key in os.environ:
      continue
    os.environ[key] = _strip_quotes(value.strip())
    loaded += 1

  return loaded
