"""Data models for authentication."""

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    Canonical user identity.

    Assigned by the identity service and embedded in every bearer token
    issued by this API. Handlers receive it from the session dependencies
    and cannot modify it.

    Attributes:
        id: Opaque user ID from the identity service
        email: User email address

    Example:
        >>> identity = Identity(id="123e4567-e89b-12d3-a456-426614174000", email="a@x.com")
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    email: str = Field(min_length=1)


class AuthSession(BaseModel):
    """Result of a successful identity service sign in, sign up or code exchange."""

    model_config = ConfigDict(frozen=True)

    identity: Identity
    refresh_token: str | None = None
