"""Pydantic models for the auth feature."""

from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    """Request model for email/password login."""

    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)


class SignupRequest(LoginRequest):
    """
    Request model for account signup.

    Only email and password are required; profile fields are optional.
    """

    username: str | None = Field(None, max_length=255)
    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "email": "a@x.com",
                "password": "pw123456",
                "username": "abc",
            }
        }


class LogoutRequest(BaseModel):
    """Request model for logout. The refresh token is optional."""

    refresh_token: str | None = Field(
        None, validation_alias=AliasChoices("refresh_token", "refreshToken")
    )


class RefreshTokenRequest(BaseModel):
    """Request model for token refresh: an identity service refresh token or an unexpired bearer token."""

    refresh_token: str = Field(
        min_length=1, validation_alias=AliasChoices("refreshToken", "refresh_token")
    )


class AuthUser(BaseModel):
    """Identity returned to the client."""

    id: str
    email: str


class AuthResponse(BaseModel):
    """Response model for endpoints that issue a bearer token."""

    message: str
    user: AuthUser
    token: str
    refresh_token: str | None = None


class MessageResponse(BaseModel):
    """Response model carrying only a message."""

    message: str
