import asyncio
import enum
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pushrelay.config import get_settings
from pushrelay.core.firebase import initialize_firebase
from pushrelay.core.logging import initialize_logging
from pushrelay.core.supabase_client import build_supabase_client, close_supabase_client
from pushrelay.notifications.contracts import SubscriptionError
from pushrelay.notifications.factory import build_notification_relay
from pushrelay.notifications.listener import ChangeFeedListener

logger = logging.getLogger("pushrelay.core.lifespan")


class LifecycleState(str, enum.Enum):
  STARTING = "starting"
  LISTENING = "listening"
  DRAINING = "draining"
  STOPPED = "stopped"


def _transition(app: FastAPI, state: LifecycleState, detail: str | None = None) -> None:
  app.state.lifecycle = state
  if detail:
    logger.info("Lifecycle state=%s (%s)", state.value, detail)
  else:
    logger.info("Lifecycle state=%s", state.value)


async def start_listener(listener: ChangeFeedListener) -> bool:
  """Start the change-feed subscription; failures are logged and never raised."""
  try:
    await listener.start()
  except SubscriptionError as exc:
    # HTTP stays up without the feed; there is no automatic resubscribe.
    logger.error("Notification listener failed to start: %s", exc, exc_info=True)
    return False
  return True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Build clients, schedule the feed subscription, and release everything on shutdown."""
  settings = get_settings()
  initialize_logging(settings)
  _transition(app, LifecycleState.STARTING)

  supabase_client = await build_supabase_client(settings)
  firebase_app = initialize_firebase(settings)
  relay = build_notification_relay(settings, supabase_client=supabase_client, firebase_app=firebase_app)
  app.state.relay = relay

  # Uvicorn binds the port after startup returns. If that bind fails, shutdown cancels the pending subscription.
  feed_task = asyncio.create_task(start_listener(relay.listener))
  _transition(app, LifecycleState.LISTENING, "feed subscription scheduled; it may connect before the HTTP port is bound")

  try:
    yield
  finally:
    _transition(app, LifecycleState.DRAINING)
    if not feed_task.done():
      feed_task.cancel()
      await asyncio.gather(feed_task, return_exceptions=True)
    await relay.listener.stop()
    await close_supabase_client(supabase_client)
    relay.dispatcher.close()
    _transition(app, LifecycleState.STOPPED)
