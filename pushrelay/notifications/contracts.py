"""Contracts for the change-feed to push delivery path."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

AUX_KEYS: tuple[str, ...] = ("post_id", "comment_id", "sender_id")


class NotificationError(Exception):
  """Base class for all notification relay failures."""


class DeliveryError(NotificationError):
  """Raised when the push delivery call fails (bad token, transport failure, rejection)."""


class SubscriptionError(NotificationError):
  """Raised when the change-feed subscription cannot be established."""


class EventParseError(NotificationError):
  """Raised when a change-feed record cannot be turned into a notification event."""


@dataclass(frozen=True)
class NotificationEvent:
  """A row inserted into the notification log."""

  user_id: str
  type: str | None
  title: str | None = None
  message: str | None = None
  post_id: str | None = None
  comment_id: str | None = None
  sender_id: str | None = None

  @classmethod
  def from_record(cls, record: Mapping[str, Any]) -> NotificationEvent:
    """Build an event from a raw inserted row."""
    if not isinstance(record, Mapping):
      raise EventParseError(f"Expected a mapping record, got {type(record).__name__}")

    user_id = record.get("user_id")
    if user_id is None or str(user_id).strip() == "":
      raise EventParseError("Notification record is missing user_id")

    return cls(
      user_id=str(user_id),
      type=_optional_text(record.get("type")),
      title=_optional_text(record.get("title")),
      message=_optional_text(record.get("message")),
      post_id=_optional_text(record.get("post_id")),
      comment_id=_optional_text(record.get("comment_id")),
      sender_id=_optional_text(record.get("sender_id")),
    )

  def aux_data(self) -> dict[str, str]:
    """Related-entity identifiers with missing values as empty strings."""
    return {key: getattr(self, key) or "" for key in AUX_KEYS}


@dataclass(frozen=True)
class PushMessage:
  """Data-only push payload addressed to a single device token."""

  token: str
  data: dict[str, str]


class TokenResolver(Protocol):
  """Lookup contract for a user's current push token."""

  async def resolve(self, user_id: str) -> str | None:
    """Return the user's token, or None when it cannot be resolved."""


class PushSender(Protocol):
  """Delivery contract for sending push messages."""

  def send(self, message: PushMessage) -> str:
    """Send a push message synchronously and return the provider message id."""

  def close(self) -> None:
    """Release provider resources."""


def _optional_text(value: Any) -> str | None:
  if value is None:
    return None
  text = str(value)
  return text if text != "" else None
