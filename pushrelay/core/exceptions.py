import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pushrelay.core.middleware import REQUEST_ID_HEADER
from pushrelay.notifications.contracts import NotificationError

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_FIELDS_MESSAGE = "Invalid request fields"

# Pydantic error types that mean the body or one of its fields never arrived.
_MISSING_ERROR_TYPES = frozenset({"missing", "json_invalid", "model_type", "model_attributes_type"})


def _error_payload(message: Any) -> dict[str, Any]:
  """Build the ``{"error": ...}`` envelope used by every failure response."""
  return {"error": message}


def _validation_message(errors: list[dict[str, Any]]) -> str:
  """Pick the 400 message: wrong-typed fields are reported apart from absent ones."""
  if all(error.get("type") in _MISSING_ERROR_TYPES for error in errors):
    return MISSING_FIELDS_MESSAGE
  return INVALID_FIELDS_MESSAGE


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
  """Return validation errors without raw input payloads."""
  sanitized: list[dict[str, Any]] = []
  for error in errors:
    scrubbed = {key: value for key, value in error.items() if key not in {"input", "ctx", "url"}}
    if "loc" in scrubbed:
      scrubbed["loc"] = [str(part) for part in scrubbed["loc"]]
    sanitized.append(scrubbed)
  return sanitized


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  """Global exception handler to catch unhandled errors."""
  logger = logging.getLogger("uvicorn.error")
  request_id = getattr(request.state, "request_id", None)
  logger.error("Global exception request_id=%s path=%s error_type=%s", request_id, request.url.path, type(exc).__name__, exc_info=True)
  # Runs outside RequestLoggingMiddleware, so the id header has to be set here.
  headers = {REQUEST_ID_HEADER: request_id} if request_id else None
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload("Internal Server Error"), headers=headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  """Map malformed request bodies onto the 400 contract of the send endpoint."""
  request_id = getattr(request.state, "request_id", None)
  logger = logging.getLogger("uvicorn.error")
  logger.warning("Request validation failed request_id=%s path=%s method=%s errors=%s", request_id, request.url.path, request.method, _sanitize_validation_errors(exc.errors()))
  return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_payload(_validation_message(exc.errors())))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
  """Render HTTPExceptions with the error envelope."""
  from pushrelay.config import get_settings

  request_id = getattr(request.state, "request_id", None)
  logger = logging.getLogger("uvicorn.error")
  if exc.status_code >= 500:
    logger.error("HTTPException request_id=%s path=%s status_code=%s detail=%s", request_id, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_payload("Internal Server Error"))

  if get_settings().log_http_4xx:
    logger.warning("HTTPException request_id=%s path=%s status_code=%s detail=%s", request_id, request.url.path, exc.status_code, exc.detail)

  return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.detail), headers=getattr(exc, "headers", None))


async def notification_exception_handler(request: Request, exc: NotificationError) -> JSONResponse:
  """Surface delivery failures to the HTTP caller as a 500 with the failure message."""
  logger = logging.getLogger("uvicorn.error")
  request_id = getattr(request.state, "request_id", None)
  logger.error("Notification failure request_id=%s path=%s error_type=%s error=%s", request_id, request.url.path, type(exc).__name__, exc)
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload(str(exc)))
