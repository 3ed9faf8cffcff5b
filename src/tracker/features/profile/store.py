"""Profile store adapter over the Supabase profile table."""

import logging
from typing import Any

from fastapi.concurrency import run_in_threadpool

from src.tracker.config import settings
from src.tracker.exceptions import (
    ProfileCreationFailed,
    ProfileFetchFailed,
    ProfileNotFound,
    ProfileUpdateFailed,
    ValidationError,
)
from src.tracker.features.profile.models import UserProfile, validate_favorite_teams
from src.tracker.services.database import SupabaseQueryBuilder, get_query_builder

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("username", "first_name", "last_name", "favorite_teams", "profile_pic_url")


class ProfileStore:
    """
    Reads and writes user profile rows keyed by ``user_id``.

    Store failures are mapped onto the API error taxonomy here so handlers
    only deal with ``ApiError``s.

    Attributes:
        db: Query builder for the profile table
        table: Profile table name
    """

    def __init__(self, db: SupabaseQueryBuilder, table: str = "user_profiles"):
        self.db = db
        self.table = table

    async def get(self, user_id: str) -> UserProfile:
        """
        Fetch a user's profile.

        Raises:
            ProfileNotFound: If no row exists for the user
            ProfileFetchFailed: If the store cannot be read
        """
        try:
            row = await run_in_threadpool(self.db.get_by_field, self.table, "user_id", user_id)
        except Exception as e:
            logger.error(f"Error fetching profile for user {user_id}: {e}")
            raise ProfileFetchFailed() from e

        if not row:
            logger.warning(f"Profile not found for user {user_id}")
            raise ProfileNotFound()

        return UserProfile(**row)

    async def create(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        """
        Insert the profile row for a newly created account.

        ``favorite_teams`` always starts empty.

        Raises:
            ProfileCreationFailed: If the insert fails or returns nothing
        """
        record = {key: value for key, value in fields.items() if key in PROFILE_FIELDS}
        record["user_id"] = user_id
        record["favorite_teams"] = []

        try:
            row = await run_in_threadpool(self.db.insert_record, self.table, record)
        except Exception as e:
            logger.error(
                f"Failed to create profile for user {user_id}: {e}",
                extra={"error_type": "profile_creation_failed", "user_id": user_id},
            )
            raise ProfileCreationFailed() from e

        if not row:
            logger.error(
                f"Profile insert returned no row for user {user_id}",
                extra={"error_type": "profile_creation_failed", "user_id": user_id},
            )
            raise ProfileCreationFailed()

        logger.info(f"Created profile for user {user_id}")
        return UserProfile(**row)

    async def update(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        """
        Apply a partial update to a user's profile.

        Validation happens before anything is written.

        Args:
            user_id: Profile owner
            fields: Profile fields to change

        Returns:
            The updated profile

        Raises:
            ValidationError: If no known field is given or favorite_teams is invalid
            ProfileNotFound: If no row exists for the user
            ProfileUpdateFailed: If the store rejects the update
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        if not fields:
            raise ValidationError("No profile fields provided")

        data = dict(fields)
        if "favorite_teams" in data:
            try:
                data["favorite_teams"] = validate_favorite_teams(data["favorite_teams"])
            except ValueError as e:
                raise ValidationError(str(e)) from e

        try:
            rows = await run_in_threadpool(
                self.db.update_by_filter, self.table, {"user_id": user_id}, data
            )
        except Exception as e:
            logger.error(
                f"Error updating profile for user {user_id}: {e}",
                extra={"error_type": "profile_update_failed", "user_id": user_id},
            )
            raise ProfileUpdateFailed() from e

        if not rows:
            logger.warning(f"Profile update matched no row for user {user_id}")
            raise ProfileNotFound()

        logger.info(f"Updated profile for user {user_id}", extra={"fields": sorted(data)})
        return UserProfile(**rows[0])


def get_profile_store() -> ProfileStore:
    """FastAPI dependency returning a profile store over the service-role client."""
    return ProfileStore(get_query_builder(), table=settings.profiles_table)
