"""Tests for the profile store adapter."""

from unittest.mock import MagicMock

import pytest

from src.tracker.exceptions import (
    ProfileCreationFailed,
    ProfileFetchFailed,
    ProfileNotFound,
    ProfileUpdateFailed,
    ValidationError,
)
from src.tracker.features.profile.models import validate_favorite_teams
from src.tracker.features.profile.store import ProfileStore


class TestValidateFavoriteTeams:
    """Tests for favorite teams validation."""

    def test_accepts_up_to_five_in_order(self):
        """Test five non-empty names pass and keep their order."""
        teams = ["Lakers", "Celtics", "NYY", "Packers", "Arsenal"]

        assert validate_favorite_teams(teams) == teams

    def test_accepts_empty_list(self):
        """Test clearing favorite teams is allowed."""
        assert validate_favorite_teams([]) == []

    @pytest.mark.parametrize(
        "teams, message",
        [
            (["A", "B", "C", "D", "E", "F"], "Maximum 5"),
            (["NYY", 42], "Invalid team names"),
            (["NYY", "   "], "Invalid team names"),
            ("Lakers", "must be an array"),
        ],
    )
    def test_rejects_invalid_values(self, teams, message):
        """Test oversize lists, non-strings, blanks and non-lists are rejected."""
        with pytest.raises(ValueError, match=message):
            validate_favorite_teams(teams)


@pytest.mark.asyncio
class TestProfileStore:
    """Tests for ProfileStore."""

    async def test_create_initializes_empty_favorite_teams(self, profile_store, profile_table):
        """Test a new profile always starts with no favorite teams."""
        profile = await profile_store.create(
            "user-1", {"username": "abc", "first_name": None, "favorite_teams": ["ignored"]}
        )

        assert profile.user_id == "user-1"
        assert profile.username == "abc"
        assert profile.favorite_teams == []
        assert profile_table.rows["user-1"]["favorite_teams"] == []

    async def test_create_failure_raises_profile_creation_failed(
        self, profile_store, profile_table
    ):
        """Test an insert failure is reported as ProfileCreationFailed."""
        profile_table.fail_inserts = True

        with pytest.raises(ProfileCreationFailed):
            await profile_store.create("user-1", {})

    async def test_get_missing_profile_raises_not_found(self, profile_store):
        """Test reading a profile that does not exist raises ProfileNotFound."""
        with pytest.raises(ProfileNotFound):
            await profile_store.get("nobody")

    async def test_get_store_failure_raises_fetch_failed(self):
        """Test a store read failure is reported as ProfileFetchFailed."""
        db = MagicMock()
        db.get_by_field.side_effect = RuntimeError("connection reset")

        with pytest.raises(ProfileFetchFailed):
            await ProfileStore(db).get("user-1")

    async def test_update_preserves_team_order(self, profile_store):
        """Test updated teams are stored in the order given."""
        await profile_store.create("user-1", {})

        profile = await profile_store.update("user-1", {"favorite_teams": ["Lakers", "Celtics"]})

        assert profile.favorite_teams == ["Lakers", "Celtics"]
        assert (await profile_store.get("user-1")).favorite_teams == ["Lakers", "Celtics"]

    async def test_update_is_partial(self, profile_store):
        """Test fields not named in the update keep their values."""
        await profile_store.create("user-1", {"username": "abc", "first_name": "Sam"})

        profile = await profile_store.update("user-1", {"last_name": "Rivera"})

        assert profile.username == "abc"
        assert profile.first_name == "Sam"
        assert profile.last_name == "Rivera"

    @pytest.mark.parametrize(
        "teams", [["A", "B", "C", "D", "E", "F"], ["NYY", 42], ["NYY", ""]]
    )
    async def test_invalid_teams_rejected_before_write(self, profile_store, profile_table, teams):
        """Test invalid favorite teams never reach the store."""
        await profile_store.create("user-1", {})

        with pytest.raises(ValidationError):
            await profile_store.update("user-1", {"favorite_teams": teams})

        assert profile_table.update_calls == 0
        assert profile_table.rows["user-1"]["favorite_teams"] == []

    async def test_empty_update_rejected(self, profile_store, profile_table):
        """Test an update naming no fields is rejected."""
        with pytest.raises(ValidationError, match="No profile fields"):
            await profile_store.update("user-1", {})

        assert profile_table.update_calls == 0

    async def test_unknown_field_rejected(self, profile_store, profile_table):
        """Test only profile columns can be written."""
        with pytest.raises(ValidationError, match="user_id"):
            await profile_store.update("user-1", {"user_id": "someone-else"})

        assert profile_table.update_calls == 0

    async def test_update_missing_profile_raises_not_found(self, profile_store):
        """Test updating a profile that does not exist raises ProfileNotFound."""
        with pytest.raises(ProfileNotFound):
            await profile_store.update("nobody", {"first_name": "Sam"})

    async def test_update_store_failure_raises_update_failed(self):
        """Test a store write failure is reported as ProfileUpdateFailed."""
        db = MagicMock()
        db.update_by_filter.side_effect = RuntimeError("permission denied")

        with pytest.raises(ProfileUpdateFailed):
            await ProfileStore(db).update("user-1", {"first_name": "Sam"})
