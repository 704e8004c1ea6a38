"""Supabase client initialization."""

from functools import lru_cache

from supabase import Client, create_client

from ..config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get Supabase client instance (cached singleton).

    Returns:
        Supabase client configured with the service role key

    Raises:
        RuntimeError: If client initialization fails
    """
    settings = get_settings()
    try:
        return create_client(settings.supabase_url, settings.supabase_service_role_key)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e
