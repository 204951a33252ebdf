import logging
import os

from pushrelay.config import get_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("entrypoint")


def build_uvicorn_args() -> list[str]:
  """Command line for serving the app on the configured host and port."""
  settings = get_settings()
  return ["uvicorn", "pushrelay.main:app", "--host", settings.host, "--port", str(settings.port), "--no-server-header"]


def main() -> None:
  """Launch the relay under uvicorn."""
  args = build_uvicorn_args()
  logger.info("Starting push relay on %s:%s", args[3], args[5])
  # Replace the current process so uvicorn receives SIGTERM directly and drains the app.
  os.execvp("uvicorn", args)


if __name__ == "__main__":
  main()
