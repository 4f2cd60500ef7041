"""
Database client factory for Supabase.

The backend talks to Supabase with the service role key: every query is
scoped to a user id by the repositories, so Row Level Security is bypassed.
"""

from supabase import create_client, Client

from .config import Settings


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role (bypasses RLS).

    The client is owned by the service container and lives as long
    as the application process.

    Returns:
        Supabase client configured with service role key

    Raises:
        RuntimeError: If Supabase is not configured
    """
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
        )
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )
