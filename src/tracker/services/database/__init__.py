"""Supabase connection and table access."""

from src.tracker.services.database.connection import (
    create_auth_client,
    get_supabase_admin_client,
)
from src.tracker.services.database.utils import SupabaseQueryBuilder, get_query_builder

__all__ = [
    "create_auth_client",
    "get_supabase_admin_client",
    "SupabaseQueryBuilder",
    "get_query_builder",
]
