"""FastAPI dependencies for bearer token authentication."""

import logging

from fastapi import Depends, Header, Request

from src.tracker.exceptions import (
    CredentialError,
    IdentityMismatch,
    MalformedCredential,
    MissingCredential,
)
from src.tracker.services import PostHogService
from src.tracker.services.auth.models import Identity
from src.tracker.services.auth.provider import (
    IdentityProviderError,
    SupabaseIdentityProvider,
    get_identity_provider,
)
from src.tracker.services.auth.tokens import TokenIssuer

logger = logging.getLogger(__name__)


def get_token_issuer(request: Request) -> TokenIssuer:
    """
    Get the token issuer built at application startup.

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    issuer = getattr(request.app.state, "token_issuer", None)
    if issuer is None:
        raise RuntimeError(
            "Token issuer not initialized. "
            "Ensure the application lifespan stores it on app.state."
        )
    return issuer


def extract_bearer_token(authorization: str | None) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header value.

    Raises:
        MissingCredential: If the header is absent or empty
        MalformedCredential: If the header is not of the form ``Bearer <token>``
    """
    if not authorization:
        raise MissingCredential()

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise MalformedCredential()

    return parts[1]


def _track_auth_failure(error: CredentialError) -> None:
    posthog_service = PostHogService()
    posthog_service.capture(
        distinct_id="anonymous",
        event="authentication_failed",
        properties={"error": error.code},
    )


async def get_current_user(
    authorization: str | None = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Identity:
    """
    Resolve the caller's identity from the bearer token.

    Verification is local (signature + expiry) with no network call. Any
    failure short-circuits the request with 401 before the handler runs.

    Args:
        authorization: Raw Authorization header
        issuer: Token issuer holding the signing secret

    Returns:
        Identity decoded from the token

    Raises:
        MissingCredential, MalformedCredential, InvalidCredential: 401

    Example:
        @router.get("/profile")
        async def get_profile(current_user: Identity = Depends(get_current_user)):
            return {"user_id": current_user.id}
    """
    try:
        token = extract_bearer_token(authorization)
        identity = issuer.verify(token)
    except CredentialError as e:
        logger.warning(f"Auth failed: {e.code}", extra={"error_type": e.code})
        _track_auth_failure(e)
        raise

    logger.debug(f"User authenticated: {identity.id}")
    return identity


async def get_confirmed_user(
    current_user: Identity = Depends(get_current_user),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """
    Resolve the caller's identity and confirm it with the identity service.

    Used on routes that write user data. The token must verify locally and
    the account it names must still exist with the same ID.

    Raises:
        IdentityMismatch: 401 if the identity service cannot confirm the token's ID
    """
    try:
        confirmed = await provider.get_user_by_id(current_user.id)
    except IdentityProviderError as e:
        logger.warning(
            f"Identity confirmation failed for user {current_user.id}: {e}",
            extra={"error_type": "identity_confirmation_failed", "user_id": current_user.id},
        )
        error = IdentityMismatch()
        _track_auth_failure(error)
        raise error from e

    if confirmed.id != current_user.id:
        logger.warning(
            f"Identity mismatch: token {current_user.id}, identity service {confirmed.id}",
            extra={"error_type": "identity_mismatch", "user_id": current_user.id},
        )
        error = IdentityMismatch()
        _track_auth_failure(error)
        raise error

    return current_user
