"""Shared fixtures for the push relay tests."""

from __future__ import annotations

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pushrelay.config import get_settings

TEST_ENV = {
  "SUPABASE_URL": "https://example.supabase.co",
  "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
  "FIREBASE_PROJECT_ID": "demo-project",
}


@pytest.fixture(autouse=True)
def setup_test_env():
  with patch.dict(os.environ, TEST_ENV):
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def anyio_backend():
  return "asyncio"


class FakeTokenResolver:
  """In-memory token lookup keyed by user id."""

  def __init__(self, tokens: dict[str, str] | None = None) -> None:
    self.tokens = dict(tokens or {})
    self.calls: list[str] = []

  async def resolve(self, user_id: str) -> str | None:
    self.calls.append(user_id)
    return self.tokens.get(user_id)


@pytest.fixture
def token_resolver():
  return FakeTokenResolver({"u1": "token-u1"})


@pytest.fixture
def push_sender():
  sender = MagicMock()
  sender.send.return_value = "projects/demo-project/messages/1"
  return sender


@pytest.fixture
def supabase_query():
  """Supabase client mock whose profile query resolves to ``query.execute``."""
  client = MagicMock()
  query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
  query.execute = AsyncMock(return_value=SimpleNamespace(data=[]))
  return client, query
