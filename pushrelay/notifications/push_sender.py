"""Push notification delivery implementations."""

from __future__ import annotations

import logging

from firebase_admin import App, messaging

from pushrelay.core.firebase import release_firebase
from pushrelay.notifications.contracts import PushMessage

logger = logging.getLogger(__name__)

ANDROID_PRIORITY = "high"
APNS_PRIORITY = "10"


def build_fcm_message(message: PushMessage) -> messaging.Message:
  """Build a data-only FCM message with per-platform priority hints.

  The ``notification`` field is intentionally never set: FCM would otherwise
  auto-display the push and bypass the app's own foreground/background handlers.
  """
  return messaging.Message(
    data=dict(message.data),
    token=message.token,
    android=messaging.AndroidConfig(priority=ANDROID_PRIORITY),
    apns=messaging.APNSConfig(headers={"apns-priority": APNS_PRIORITY}),
  )


class FirebasePushSender:
  """`firebase_admin.messaging` backed sender without retries."""

  def __init__(self, *, app: App) -> None:
    self._app = app

  def send(self, message: PushMessage) -> str:
    """Send one message and return the FCM message id."""
    fcm_message = build_fcm_message(message)
    return messaging.send(fcm_message, app=self._app)

  def close(self) -> None:
    """Release the Firebase app owned by this sender."""
    release_firebase(self._app)
