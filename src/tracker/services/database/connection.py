"""Supabase client management."""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from src.tracker.config import settings


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Get Supabase admin client with service role key (singleton pattern).

    This client bypasses Row-Level Security (RLS) policies and is used for the
    profile table and for admin user lookups, both of which are guarded by the
    API's own bearer token checks.

    ⚠️ WARNING: This client has full database access. Only use for trusted server-side operations.

    Returns:
        Configured Supabase client with service role key (bypasses RLS)

    Example:
        >>> client = get_supabase_admin_client()
        >>> response = client.table("user_profiles").select("*").execute()
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def create_auth_client() -> Client:
    """
    Create a short-lived Supabase client for a single auth operation.

    Sign in, sign up and code exchange store the resulting session on the
    client. A fresh client with session persistence and auto refresh
    disabled keeps that session private to the request that created it.

    Returns:
        New Supabase client using the anon key

    Example:
        >>> client = create_auth_client()
        >>> client.auth.sign_in_with_password({"email": email, "password": password})
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(persist_session=False, auto_refresh_token=False),
    )
