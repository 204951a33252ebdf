"""Factory helpers for the notification relay."""

from __future__ import annotations

from dataclasses import dataclass

from firebase_admin import App
from supabase import AsyncClient

from pushrelay.config import Settings
from pushrelay.notifications.listener import ChangeFeedListener
from pushrelay.notifications.push_sender import FirebasePushSender
from pushrelay.notifications.service import NotificationDispatcher
from pushrelay.notifications.token_store import SupabaseTokenStore


@dataclass(frozen=True)
class NotificationRelay:
  """The dispatcher and the listener feeding it, sharing process-lifetime clients."""

  dispatcher: NotificationDispatcher
  listener: ChangeFeedListener


def build_notification_relay(settings: Settings, *, supabase_client: AsyncClient, firebase_app: App) -> NotificationRelay:
  """Construct the relay components from already-initialized clients."""
  token_store = SupabaseTokenStore(supabase_client, table=settings.profiles_table)
  push_sender = FirebasePushSender(app=firebase_app)
  dispatcher = NotificationDispatcher(token_resolver=token_store, push_sender=push_sender)
  listener = ChangeFeedListener(client=supabase_client, dispatcher=dispatcher, schema=settings.feed_schema, table=settings.feed_table)
  return NotificationRelay(dispatcher=dispatcher, listener=listener)
