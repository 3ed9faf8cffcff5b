"""Generic database utility functions for Supabase interactions."""

import logging
from typing import Any

from supabase import Client

from src.tracker.services.database.connection import get_supabase_admin_client

logger = logging.getLogger(__name__)


class SupabaseQueryBuilder:
    """Helper class for building and executing Supabase table queries."""

    def __init__(self, client: Client | None = None) -> None:
        """
        Initialize query builder.

        Args:
            client: Supabase client instance (uses the service-role client if None)
        """
        self.client = client or get_supabase_admin_client()

    def get_by_field(
        self, table: str, field: str, value: Any, columns: str = "*"
    ) -> dict[str, Any] | None:
        """
        Fetch a single record by field value.

        Args:
            table: Table name
            field: Field name to filter by
            value: Field value
            columns: Columns to select (default: "*")

        Returns:
            First matching record or None

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> profile = builder.get_by_field("user_profiles", "user_id", user_id)
        """
        response = self.client.table(table).select(columns).eq(field, value).limit(1).execute()
        return response.data[0] if response.data else None

    def insert_record(self, table: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Insert a single record.

        Args:
            table: Table name
            data: Record data dictionary

        Returns:
            Inserted record dictionary or None if nothing was returned

        Raises:
            Exception: If insert operation fails

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> profile = builder.insert_record(
            ...     "user_profiles",
            ...     {"user_id": user_id, "username": "abc", "favorite_teams": []}
            ... )
        """
        response = self.client.table(table).insert(data).execute()
        return response.data[0] if response.data else None

    def update_by_filter(
        self, table: str, filters: dict[str, Any], data: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """
        Update records matching filters.

        Args:
            table: Table name
            filters: Dictionary of field:value pairs for filtering
            data: Fields to update

        Returns:
            List of updated record dictionaries

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> updated = builder.update_by_filter(
            ...     "user_profiles",
            ...     {"user_id": user_id},
            ...     {"favorite_teams": ["Lakers", "Celtics"]}
            ... )
        """
        query = self.client.table(table).update(data)

        for field, value in filters.items():
            query = query.eq(field, value)

        response = query.execute()
        return response.data


def get_query_builder() -> SupabaseQueryBuilder:
    """
    Get a query builder over the service-role client.

    Returns:
        SupabaseQueryBuilder instance
    """
    return SupabaseQueryBuilder()
