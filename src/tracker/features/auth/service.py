"""Credential verification and session renewal."""

import logging

from src.tracker.exceptions import (
    AuthenticationFailed,
    InvalidCredential,
    ProfileCreationFailed,
    SignupFailed,
    ValidationError,
)
from src.tracker.features.profile.store import ProfileStore
from src.tracker.services.auth.models import AuthSession, Identity
from src.tracker.services.auth.provider import IdentityProviderError, SupabaseIdentityProvider
from src.tracker.services.auth.tokens import TokenIssuer

logger = logging.getLogger(__name__)


def _looks_like_jwt(token: str) -> bool:
    return token.count(".") == 2


class CredentialVerifier:
    """
    Service for signup, login and token renewal.

    Passwords only ever travel to the identity service. On success callers
    get the canonical identity and the identity service's refresh token,
    and mint the API's own bearer token with ``TokenIssuer``.
    """

    def __init__(self, provider: SupabaseIdentityProvider, store: ProfileStore) -> None:
        self.provider = provider
        self.store = store

    async def login(self, email: str, password: str) -> AuthSession:
        """
        Verify an email/password pair.

        Raises:
            ValidationError: If either field is empty
            AuthenticationFailed: If the identity service rejects the credentials
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        try:
            return await self.provider.sign_in_with_password(email, password)
        except IdentityProviderError as e:
            raise AuthenticationFailed() from e

    async def signup(
        self,
        email: str,
        password: str,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthSession:
        """
        Create an account and its profile row.

        The profile is created after the account. If that second step fails
        the account is left in place without a profile and
        ``ProfileCreationFailed`` is raised; nothing is rolled back.

        Raises:
            ValidationError: If email or password is empty
            SignupFailed: If the identity service rejects the signup
            ProfileCreationFailed: If the profile row cannot be created
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        profile_fields = {
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
        }

        try:
            session = await self.provider.sign_up(
                email, password, metadata={**profile_fields, "favorite_teams": []}
            )
        except IdentityProviderError as e:
            raise SignupFailed(f"Signup failed: {e}") from e

        try:
            await self.store.create(session.identity.id, profile_fields)
        except ProfileCreationFailed:
            logger.error(
                f"Account {session.identity.id} created without a profile",
                extra={"error_type": "partial_signup", "user_id": session.identity.id},
            )
            raise

        return session

    async def refresh(
        self, presented: str, issuer: TokenIssuer
    ) -> tuple[Identity, str, str | None]:
        """
        Mint a new bearer token from a refresh artifact.

        A JWT-shaped value is treated as one of this API's bearer tokens and
        must still verify. Anything else is exchanged with the identity
        service as a refresh token, which rotates it.

        Returns:
            Identity, new bearer token, and the new refresh token (None when
            a bearer token was presented)

        Raises:
            InvalidCredential: If the artifact is rejected, for whichever reason
        """
        if _looks_like_jwt(presented):
            identity, token = issuer.refresh(presented)
            return identity, token, None

        try:
            session = await self.provider.refresh_session(presented)
        except IdentityProviderError as e:
            raise InvalidCredential() from e

        return session.identity, issuer.issue(session.identity), session.refresh_token
