import logging

from supabase import AsyncClient, acreate_client

from pushrelay.config import Settings

logger = logging.getLogger(__name__)


async def build_supabase_client(settings: Settings) -> AsyncClient:
  """Create the async Supabase client used for profile lookups and the realtime feed."""
  client = await acreate_client(settings.supabase_url, settings.supabase_service_role_key)
  logger.info("Supabase client created url=%s", settings.supabase_url)
  return client


async def close_supabase_client(client: AsyncClient) -> None:
  """Drop realtime channels and close the websocket connection."""
  try:
    await client.remove_all_channels()
  except Exception as exc:  # noqa: BLE001
    logger.warning("Failed to close Supabase realtime channels: %s", exc)
  else:
    logger.info("Supabase realtime channels closed.")
