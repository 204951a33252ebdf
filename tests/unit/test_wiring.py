from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from pushrelay import entrypoint
from pushrelay.config import get_settings
from pushrelay.core.logging import TruncatedFormatter, setup_logging
from pushrelay.core.supabase_client import close_supabase_client
from pushrelay.notifications.factory import build_notification_relay
from pushrelay.notifications.listener import ChangeFeedListener
from pushrelay.notifications.service import NotificationDispatcher


def test_build_notification_relay_shares_clients(monkeypatch):
  monkeypatch.setenv("PUSHRELAY_FEED_TABLE", "activity")
  supabase_client = MagicMock()

  relay = build_notification_relay(get_settings(), supabase_client=supabase_client, firebase_app=MagicMock())

  assert isinstance(relay.dispatcher, NotificationDispatcher)
  assert isinstance(relay.listener, ChangeFeedListener)
  assert relay.listener.channel_name == "public:activity"


def test_uvicorn_args_use_configured_port(monkeypatch):
  monkeypatch.setenv("PORT", "4100")

  args = entrypoint.build_uvicorn_args()

  assert args[:2] == ["uvicorn", "pushrelay.main:app"]
  assert args[args.index("--port") + 1] == "4100"
  assert args[args.index("--host") + 1] == "0.0.0.0"


def test_main_execs_uvicorn(monkeypatch):
  calls = []
  monkeypatch.setattr(entrypoint.os, "execvp", lambda file, args: calls.append((file, args)))

  entrypoint.main()

  assert calls[0][0] == "uvicorn"
  assert "--port" in calls[0][1]


def test_setup_logging_points_uvicorn_at_shared_handler(monkeypatch):
  monkeypatch.setenv("PUSHRELAY_LOG_LEVEL", "warning")
  basic_config = MagicMock()
  monkeypatch.setattr("pushrelay.core.logging.logging.basicConfig", basic_config)
  uvicorn_error = logging.getLogger("uvicorn.error")
  names = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")
  saved = {name: (logging.getLogger(name).handlers[:], logging.getLogger(name).propagate) for name in names}

  try:
    handler = setup_logging(get_settings())

    assert uvicorn_error.handlers == [handler]
    assert uvicorn_error.propagate is False
    assert isinstance(handler.formatter, TruncatedFormatter)
    basic_config.assert_called_once_with(level=logging.WARNING, handlers=[handler], force=True)
  finally:
    for name, (handlers, propagate) in saved.items():
      logging.getLogger(name).handlers = handlers
      logging.getLogger(name).propagate = propagate


@pytest.mark.anyio
async def test_close_supabase_client_tolerates_errors():
  client = MagicMock()
  client.remove_all_channels = AsyncMock(side_effect=RuntimeError("socket already closed"))

  await close_supabase_client(client)

  client.remove_all_channels.assert_awaited_once_with()
