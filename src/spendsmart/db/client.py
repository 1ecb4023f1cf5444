"""
SpendSmart - Supabase Client.

Low-level database access. All clients are created here.
"""

import logging

from supabase import Client, create_client

from spendsmart.config import settings

logger = logging.getLogger(__name__)

# Singleton client instances
_service_client: Client | None = None


def get_service_client() -> Client:
    """
    Get the Supabase client with the service role key.

    Used server-side for token validation and writes on behalf of a
    validated user.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )
        logger.info(f"Supabase service client initialised ({settings.supabase_url})")

    return _service_client
