import logging
import os

import firebase_admin
from firebase_admin import App, credentials

from pushrelay.config import Settings

logger = logging.getLogger(__name__)


def _load_credential(settings: Settings) -> credentials.Base | None:
  """Pick the service-account credential: inline JSON first, then the local file."""
  if settings.firebase_service_account_info is not None:
    logger.info("Using inline Firebase service account from FIREBASE_SERVICE_ACCOUNT_JSON.")
    return credentials.Certificate(settings.firebase_service_account_info)

  if os.path.isfile(settings.firebase_service_account_path):
    logger.info("Using Firebase service account file %s.", settings.firebase_service_account_path)
    return credentials.Certificate(settings.firebase_service_account_path)

  logger.warning("No Firebase service account found at %s; falling back to application default credentials.", settings.firebase_service_account_path)
  return None


def initialize_firebase(settings: Settings) -> App:
  """Initialize the Firebase Admin SDK and return the app handle."""
  if firebase_admin._apps:
    return firebase_admin.get_app()

  options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
  cred = _load_credential(settings)
  app = firebase_admin.initialize_app(cred, options)
  logger.info("Firebase Admin SDK initialized project_id=%s", settings.firebase_project_id or "<from credential>")
  return app


def release_firebase(app: App) -> None:
  """Delete the Firebase app so its HTTP sessions are closed."""
  try:
    firebase_admin.delete_app(app)
    logger.info("Firebase app released.")
  except ValueError:
    # Already deleted.
    logger.debug("Firebase app was already released.")
