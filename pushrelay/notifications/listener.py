"""Supabase Realtime listener that turns notification inserts into push deliveries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from supabase import AsyncClient

from pushrelay.notifications.contracts import NotificationEvent, SubscriptionError
from pushrelay.notifications.service import NotificationDispatcher
from pushrelay.notifications.templates import body_for, title_for

logger = logging.getLogger(__name__)


def extract_record(payload: Mapping[str, Any]) -> Mapping[str, Any] | None:
  """Return the inserted row from a realtime ``postgres_changes`` payload."""
  # realtime-py nests the row under data.record; older/raw frames use record or new.
  data = payload.get("data")
  if isinstance(data, Mapping) and isinstance(data.get("record"), Mapping):
    return data["record"]
  for key in ("record", "new"):
    value = payload.get(key)
    if isinstance(value, Mapping):
      return value
  return None


class ChangeFeedListener:
  """Subscribes to inserts on one table and dispatches a push per row."""

  def __init__(self, *, client: AsyncClient, dispatcher: NotificationDispatcher, schema: str = "public", table: str = "notifications") -> None:
    self._client = client
    self._dispatcher = dispatcher
    self._schema = schema
    self._table = table
    self._channel: Any | None = None
    self._tasks: set[asyncio.Task[str | None]] = set()

  @property
  def channel_name(self) -> str:
    return f"{self._schema}:{self._table}"

  @property
  def is_subscribed(self) -> bool:
    return self._channel is not None

  @property
  def pending(self) -> int:
    """Number of events still being processed."""
    return len(self._tasks)

  async def start(self) -> None:
    """Open the realtime channel and register the insert handler."""
    logger.info("Starting notification listener channel=%s", self.channel_name)
    try:
      channel = self._client.channel(self.channel_name)
      channel.on_postgres_changes("INSERT", schema=self._schema, table=self._table, callback=self._on_insert)
      await channel.subscribe(self._on_status)
    except Exception as exc:  # noqa: BLE001
      raise SubscriptionError(f"Failed to subscribe to {self.channel_name}: {exc}") from exc

    self._channel = channel
    logger.info("Notification listener started channel=%s", self.channel_name)

  async def stop(self) -> None:
    """Unsubscribe and wait for in-flight events to finish."""
    channel, self._channel = self._channel, None
    if channel is not None:
      try:
        await channel.unsubscribe()
      except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to unsubscribe channel=%s error=%s", self.channel_name, exc)

    if self._tasks:
      logger.info("Waiting for %d in-flight notification(s)", len(self._tasks))
      await asyncio.gather(*self._tasks, return_exceptions=True)
    logger.info("Notification listener stopped channel=%s", self.channel_name)

  def _on_status(self, status: Any, error: Exception | None = None) -> None:
    """Log channel state changes reported by the realtime client."""
    state = getattr(status, "value", status)
    if error is not None:
      logger.error("Realtime channel=%s state=%s error=%s", self.channel_name, state, error)
    else:
      logger.info("Realtime channel=%s state=%s", self.channel_name, state)

  def _on_insert(self, payload: Mapping[str, Any]) -> None:
    """Realtime callback; schedules the row for processing and returns immediately."""
    record = extract_record(payload) if isinstance(payload, Mapping) else None
    if record is None:
      logger.error("Ignoring realtime payload without a record channel=%s", self.channel_name)
      return

    self.submit(record)

  def submit(self, record: Mapping[str, Any]) -> asyncio.Task[str | None]:
    """Process ``record`` as an independent task."""
    task = asyncio.create_task(self.handle_record(record))
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)
    return task

  async def handle_record(self, record: Mapping[str, Any]) -> str | None:
    """Dispatch one inserted notification row; failures are logged and never raised."""
    try:
      event = NotificationEvent.from_record(record)
      logger.info("New notification detected user_id=%s type=%s", event.user_id, event.type)

      return await self._dispatcher.dispatch(
        user_id=event.user_id,
        title=event.title or title_for(event.type),
        body=event.message or body_for(event.type),
        category=event.type or "",
        data=event.aux_data(),
      )
    except Exception as exc:  # noqa: BLE001
      # One bad event must not take down the subscription.
      logger.error("Error processing notification record error=%s", exc, exc_info=True)
      return None
