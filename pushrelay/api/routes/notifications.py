"""Manual trigger for push notifications."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from pushrelay.core.exceptions import MISSING_FIELDS_MESSAGE
from pushrelay.notifications.service import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


class SendNotificationRequest(BaseModel):
  """Manual send payload; presence of the text fields is checked by the route."""

  user_id: str | None = Field(default=None, alias="userId")
  title: str | None = None
  body: str | None = None
  type: str | None = None
  data: dict[str, Any] | None = None
  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  def missing_fields(self) -> list[str]:
    """Names of required fields that are absent or empty."""
    required = {"userId": self.user_id, "title": self.title, "body": self.body, "type": self.type}
    return [name for name, value in required.items() if not value]


class SendNotificationResponse(BaseModel):
  success: bool
  message_id: str | None = Field(serialization_alias="messageId")


def get_dispatcher(request: Request) -> NotificationDispatcher:
  """Return the dispatcher built during startup."""
  relay = getattr(request.app.state, "relay", None)
  if relay is None:
    raise RuntimeError("Notification relay is not initialized.")
  return relay.dispatcher


@router.post("/send", response_model=None)
async def send_notification(payload: SendNotificationRequest, dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> JSONResponse:
  """Send a push notification to one user on demand."""
  missing = payload.missing_fields()
  if missing:
    logger.info("Rejecting manual send; missing fields=%s", ",".join(missing))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": MISSING_FIELDS_MESSAGE})

  # DeliveryError propagates to the registered handler and becomes a 500.
  message_id = await dispatcher.dispatch(user_id=payload.user_id, title=payload.title, body=payload.body, category=payload.type, data=payload.data)
  response = SendNotificationResponse(success=True, message_id=message_id)
  return JSONResponse(content=response.model_dump(by_alias=True))
