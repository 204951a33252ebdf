"""Push token lookups against the Supabase profile table."""

from __future__ import annotations

import logging

from supabase import AsyncClient

logger = logging.getLogger(__name__)


class SupabaseTokenStore:
  """Resolve a user's current FCM token from the profiles table."""

  def __init__(self, client: AsyncClient, *, table: str = "profiles", token_column: str = "fcm_token") -> None:
    self._client = client
    self._table = table
    self._token_column = token_column

  async def resolve(self, user_id: str) -> str | None:
    """Return the stored token, or None when the profile, the token, or the lookup is missing."""
    try:
      response = await self._client.table(self._table).select(self._token_column).eq("id", user_id).limit(1).execute()
    except Exception as exc:  # noqa: BLE001
      # Transport failures collapse into a miss; callers only see None.
      logger.error("Token lookup failed user_id=%s error=%s", user_id, exc, exc_info=True)
      return None

    rows = response.data or []
    if not rows:
      logger.info("No profile found user_id=%s", user_id)
      return None

    token = rows[0].get(self._token_column)
    if not token:
      logger.info("No push token stored user_id=%s", user_id)
      return None

    return str(token)
