"""Default titles and bodies for notification categories."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PushTemplate:
  """Default display text for a notification category."""

  category: str
  title: str
  body: str


FALLBACK = PushTemplate(category="unknown", title="New Notification", body="You have a new notification")

TEMPLATES: dict[str, PushTemplate] = {
  "like": PushTemplate(category="like", title="❤️ New Like", body="Someone liked your post"),
  "comment": PushTemplate(category="comment", title="💬 New Comment", body="Someone commented on your post"),
  "follow": PushTemplate(category="follow", title="👤 New Follower", body="Someone started following you"),
  "reply": PushTemplate(category="reply", title="↩️ New Reply", body="Someone replied to your comment"),
  "mention": PushTemplate(category="mention", title="@️ Mention", body="Someone mentioned you"),
}


def template_for(category: str | None) -> PushTemplate:
  """Return the template for ``category`` or the generic fallback."""
  if category is None:
    return FALLBACK
  return TEMPLATES.get(category, FALLBACK)


def title_for(category: str | None) -> str:
  return template_for(category).title


def body_for(category: str | None) -> str:
  return template_for(category).body
