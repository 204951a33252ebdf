from __future__ import annotations

from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pushrelay.api.routes import notifications
from pushrelay.core.exceptions import global_exception_handler, http_exception_handler, notification_exception_handler, request_validation_exception_handler
from pushrelay.core.lifespan import lifespan
from pushrelay.core.middleware import RequestLoggingMiddleware
from pushrelay.notifications.contracts import NotificationError


def create_app() -> FastAPI:
  """Build the FastAPI application with routes, handlers and middleware."""
  app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

  app.add_exception_handler(Exception, global_exception_handler)
  app.add_exception_handler(StarletteHTTPException, http_exception_handler)
  app.add_exception_handler(NotificationError, notification_exception_handler)
  app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

  app.add_middleware(RequestLoggingMiddleware)

  @app.get("/health", include_in_schema=False)
  async def health_check() -> dict[str, str]:
    """Liveness probe; independent of the change-feed state."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}

  app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
  return app


app = create_app()
