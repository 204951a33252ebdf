import logging
import sys
import traceback
from types import TracebackType

from pushrelay.config import Settings

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

_LOGGING_INITIALIZED = False


class TruncatedFormatter(logging.Formatter):
  """Formatter that truncates the stack trace to the last few lines."""

  # ruff: noqa: N802
  def formatException(self, ei: tuple[type[BaseException] | None, BaseException | None, TracebackType | None]) -> str:
    lines = traceback.format_exception(*ei)
    # Keep header + last 5 lines of traceback
    if len(lines) > 6:
      return "".join(lines[:1] + ["    ...\n"] + lines[-5:])
    return "".join(lines)


def _build_handler() -> logging.Handler:
  """Create the stdout handler shared by the app and uvicorn loggers."""
  stream = logging.StreamHandler(sys.stdout)
  stream.setFormatter(TruncatedFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  return stream


def setup_logging(settings: Settings) -> logging.Handler:
  """Ensure all loggers use our handler and propagate to root."""
  level = logging.getLevelName(settings.log_level)
  if not isinstance(level, int):
    level = logging.INFO

  handler = _build_handler()
  for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
    log = logging.getLogger(logger_name)
    log.handlers = [handler]
    log.propagate = False

  logging.basicConfig(level=level, handlers=[handler], force=True)
  # The realtime websocket client is chatty at DEBUG; keep it at our level or above.
  logging.getLogger("realtime").setLevel(max(level, logging.INFO))
  return handler


def initialize_logging(settings: Settings) -> None:
  """Initialize logging once per process."""
  global _LOGGING_INITIALIZED
  if _LOGGING_INITIALIZED:
    return
  setup_logging(settings)
  _LOGGING_INITIALIZED = True
  logging.getLogger("pushrelay.core.logging").info("Logging initialized at level=%s environment=%s", settings.log_level, settings.environment)
