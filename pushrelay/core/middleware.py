import logging
import time
import uuid
from typing import Any

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("pushrelay.core.middleware")

REQUEST_ID_HEADER = "x-request-id"


def _build_request_url(scope: Scope) -> str:
  """Build a readable URL path for logging without relying on Request bodies."""
  path = scope.get("path", "")
  query_string = scope.get("query_string", b"")
  if query_string:
    return f"{path}?{query_string.decode('latin-1')}"

  return path


class RequestLoggingMiddleware:
  """Log request/response metadata and tag each request with an id."""

  def __init__(self, app: ASGIApp) -> None:
    self.app = app

  async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
    """Record request/response metadata without logging request bodies."""
    # Skip non-HTTP scopes so lifespan events pass straight through.
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    # Store the request id for handlers and exception logging.
    request_id = str(uuid.uuid4())
    scope.setdefault("state", {})["request_id"] = request_id

    start_time = time.time()
    method = scope.get("method", "UNKNOWN")
    logger.info("Incoming request request_id=%s %s %s", request_id, method, _build_request_url(scope))

    status_code: int | None = None

    async def send_wrapper(message: dict[str, Any]) -> None:
      nonlocal status_code
      if message.get("type") == "http.response.start":
        status_code = message.get("status")
        response_headers = MutableHeaders(scope=message)
        if REQUEST_ID_HEADER not in response_headers:
          response_headers[REQUEST_ID_HEADER] = request_id

      await send(message)

    await self.app(scope, receive, send_wrapper)

    process_time = (time.time() - start_time) * 1000
    logger.info("Response request_id=%s status=%s (took %.2fms)", request_id, status_code or 0, process_time)
