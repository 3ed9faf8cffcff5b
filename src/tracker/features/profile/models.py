"""Pydantic models for the user profile feature."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

MAX_FAVORITE_TEAMS = 5


def validate_favorite_teams(teams: Any) -> list[str]:
    """
    Check a favorite teams value before it is written.

    Args:
        teams: Candidate value from a request body

    Returns:
        The teams as a list, order preserved

    Raises:
        ValueError: If the value is not a list of at most five non-empty strings
    """
    if not isinstance(teams, (list, tuple)):
        raise ValueError("Favorite teams must be an array")
    if len(teams) > MAX_FAVORITE_TEAMS:
        raise ValueError(f"Maximum {MAX_FAVORITE_TEAMS} favorite teams allowed")
    if any(not isinstance(team, str) or not team.strip() for team in teams):
        raise ValueError("Invalid team names provided")
    return list(teams)


class UserProfile(BaseModel):
    """User profile row as stored in the profile table."""

    user_id: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    favorite_teams: list[str] = Field(default_factory=list)
    profile_pic_url: str | None = None

    @field_validator("favorite_teams", mode="before")
    @classmethod
    def _null_teams_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ProfileUpdateRequest(BaseModel):
    """Request model for a partial profile update. Omitted or null fields are left unchanged."""

    username: str | None = Field(None, max_length=255)
    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    favorite_teams: list[str] | None = Field(None, description="Up to 5 team names, in order")
    profile_pic_url: str | None = Field(None, max_length=2048)

    @field_validator("favorite_teams")
    @classmethod
    def _check_favorite_teams(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else validate_favorite_teams(value)

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "first_name": "John",
                "favorite_teams": ["Lakers", "Celtics"],
            }
        }


class ProfileUser(BaseModel):
    """Profile data returned to the client, merged with the caller's identity."""

    id: str
    email: str
    username: str | None = None
    first_name: str = ""
    last_name: str = ""
    favorite_teams: list[str] = Field(default_factory=list)
    profile_pic_url: str | None = None


class ProfileResponse(BaseModel):
    """Response model for profile endpoints."""

    message: str
    user: ProfileUser
