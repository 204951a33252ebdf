from __future__ import annotations

from unittest.mock import MagicMock

from pushrelay.notifications.contracts import PushMessage
from pushrelay.notifications.push_sender import FirebasePushSender, build_fcm_message


def _message() -> PushMessage:
  return PushMessage(token="device-token", data={"type": "like", "title": "❤️ New Like", "body": "Someone liked your post", "post_id": ""})


def test_build_fcm_message_is_data_only():
  fcm_message = build_fcm_message(_message())

  assert fcm_message.notification is None
  assert fcm_message.token == "device-token"
  assert fcm_message.data == {"type": "like", "title": "❤️ New Like", "body": "Someone liked your post", "post_id": ""}


def test_build_fcm_message_sets_platform_priorities():
  fcm_message = build_fcm_message(_message())

  assert fcm_message.android.priority == "high"
  assert fcm_message.apns.headers == {"apns-priority": "10"}


def test_send_returns_message_id(monkeypatch):
  captured = {}

  def _send(message, app=None):
    captured["message"] = message
    captured["app"] = app
    return "projects/demo/messages/42"

  monkeypatch.setattr("pushrelay.notifications.push_sender.messaging.send", _send)
  firebase_app = MagicMock()

  sender = FirebasePushSender(app=firebase_app)

  assert sender.send(_message()) == "projects/demo/messages/42"
  assert captured["app"] is firebase_app
  assert captured["message"].token == "device-token"


def test_close_releases_firebase_app(monkeypatch):
  released = []
  monkeypatch.setattr("pushrelay.notifications.push_sender.release_firebase", released.append)
  firebase_app = MagicMock()

  FirebasePushSender(app=firebase_app).close()

  assert released == [firebase_app]
