"""Notification dispatch from user id to a delivered push message."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from starlette.concurrency import run_in_threadpool

from pushrelay.notifications.contracts import DeliveryError, PushMessage, PushSender, TokenResolver

logger = logging.getLogger(__name__)


def build_push_data(*, title: str, body: str, category: str, data: Mapping[str, Any] | None = None) -> dict[str, str]:
  """Flatten the notification content into the string-only FCM data mapping."""
  payload: dict[str, str] = {"type": str(category), "title": str(title), "body": str(body)}
  # FCM data values must be strings; missing values become empty strings, never absent keys.
  for key, value in (data or {}).items():
    payload[str(key)] = "" if value is None else str(value)
  return payload


class NotificationDispatcher:
  """Resolves a user's token and submits a data-only push message."""

  def __init__(self, *, token_resolver: TokenResolver, push_sender: PushSender) -> None:
    self._token_resolver = token_resolver
    self._push_sender = push_sender

  async def dispatch(self, *, user_id: str, title: str, body: str, category: str, data: Mapping[str, Any] | None = None) -> str | None:
    """Send a push to ``user_id`` and return the delivery id, or None when the user has no token."""
    logger.info("Sending %s notification user_id=%s", category, user_id)

    token = await self._token_resolver.resolve(user_id)
    if not token:
      logger.info("No push token for user_id=%s; skipping delivery", user_id)
      return None

    message = PushMessage(token=token, data=build_push_data(title=title, body=body, category=category, data=data))

    try:
      # firebase_admin is blocking; keep the event loop free while it talks to FCM.
      message_id = await run_in_threadpool(self._push_sender.send, message)
    except Exception as exc:  # noqa: BLE001
      logger.error("Push delivery failed user_id=%s category=%s error=%s", user_id, category, exc)
      raise DeliveryError(str(exc) or type(exc).__name__) from exc

    logger.info("Push delivered user_id=%s message_id=%s", user_id, message_id)
    return message_id

  def close(self) -> None:
    """Release delivery-service resources."""
    self._push_sender.close()
