from __future__ import annotations

from types import SimpleNamespace

import pytest

from pushrelay.notifications.token_store import SupabaseTokenStore


@pytest.mark.anyio
async def test_resolve_returns_stored_token(supabase_query):
  client, query = supabase_query
  query.execute.return_value = SimpleNamespace(data=[{"fcm_token": "device-token"}])

  token = await SupabaseTokenStore(client).resolve("u1")

  assert token == "device-token"
  client.table.assert_called_once_with("profiles")
  client.table.return_value.select.assert_called_once_with("fcm_token")
  client.table.return_value.select.return_value.eq.assert_called_once_with("id", "u1")


@pytest.mark.anyio
@pytest.mark.parametrize("rows", [[], None, [{"fcm_token": None}], [{"fcm_token": ""}], [{}]])
async def test_resolve_returns_none_for_missing_profile_or_token(supabase_query, rows):
  client, query = supabase_query
  query.execute.return_value = SimpleNamespace(data=rows)

  assert await SupabaseTokenStore(client).resolve("u1") is None


@pytest.mark.anyio
async def test_resolve_returns_none_when_lookup_fails(supabase_query):
  client, query = supabase_query
  query.execute.side_effect = ConnectionError("network down")

  assert await SupabaseTokenStore(client).resolve("u1") is None


@pytest.mark.anyio
async def test_resolve_uses_configured_table(supabase_query):
  client, query = supabase_query
  query.execute.return_value = SimpleNamespace(data=[{"fcm_token": "t"}])

  await SupabaseTokenStore(client, table="user_profiles").resolve("u1")

  client.table.assert_called_once_with("user_profiles")
