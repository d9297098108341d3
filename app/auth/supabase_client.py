"""
Supabase Client Configuration
Provides the client used for password sign-in and token validation.
"""

from functools import lru_cache

from supabase import Client, create_client

from app.config import settings


@lru_cache()
def get_supabase() -> Client:
    """Public client for sign-in and token validation (uses anon key)."""
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
    )
