"""API handlers for authentication endpoints."""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from src.tracker.config import settings
from src.tracker.exceptions import CallbackFailed, LogoutFailed, ValidationError
from src.tracker.features.auth.models import (
    AuthResponse,
    AuthUser,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshTokenRequest,
    SignupRequest,
)
from src.tracker.features.auth.service import CredentialVerifier
from src.tracker.features.profile.store import ProfileStore, get_profile_store
from src.tracker.services import PostHogService
from src.tracker.services.auth.dependencies import get_token_issuer
from src.tracker.services.auth.models import Identity
from src.tracker.services.auth.provider import (
    IdentityProviderError,
    SupabaseIdentityProvider,
    get_identity_provider,
)
from src.tracker.services.auth.tokens import TokenIssuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_credential_verifier(
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
) -> CredentialVerifier:
    """FastAPI dependency wiring the credential verifier to its collaborators."""
    return CredentialVerifier(provider, store)


def _auth_user(identity: Identity) -> AuthUser:
    return AuthUser(id=identity.id, email=identity.email)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignupRequest,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """
    Create an account, create its profile and issue a bearer token.

    Raises:
        ValidationError: 400 if email or password is missing
        SignupFailed: 400 if the identity service rejects the signup
        ProfileCreationFailed: 500 if the account was created but its profile was not
    """
    session = await verifier.signup(
        req.email,
        req.password,
        username=req.username,
        first_name=req.first_name,
        last_name=req.last_name,
    )
    token = issuer.issue(session.identity)

    logger.info(f"User signed up: {session.identity.id}")
    posthog_service = PostHogService()
    posthog_service.capture(
        distinct_id=session.identity.id,
        event="user_signed_up",
        properties={"has_username": bool(req.username)},
    )

    return AuthResponse(
        message="Signup successful",
        user=_auth_user(session.identity),
        token=token,
        refresh_token=session.refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """
    Verify email/password with the identity service and issue a bearer token.

    Raises:
        ValidationError: 400 if email or password is missing
        AuthenticationFailed: 401 if the credentials are rejected
    """
    session = await verifier.login(req.email, req.password)
    token = issuer.issue(session.identity)

    logger.info(f"User logged in: {session.identity.id}")
    posthog_service = PostHogService()
    posthog_service.capture(
        distinct_id=session.identity.id,
        event="user_logged_in",
        properties={"method": "password"},
    )

    return AuthResponse(
        message="Login successful",
        user=_auth_user(session.identity),
        token=token,
        refresh_token=session.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    req: LogoutRequest | None = None,
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
) -> MessageResponse:
    """
    Sign out of the identity service.

    When a refresh token is supplied its session is revoked. Bearer tokens
    are stateless and remain valid until they expire; clients discard them.

    Raises:
        LogoutFailed: 400 if the identity service rejects the sign out
    """
    refresh_token = req.refresh_token if req else None
    try:
        await provider.sign_out(refresh_token)
    except IdentityProviderError as e:
        raise LogoutFailed(f"Logout failed: {e}") from e

    return MessageResponse(message="Logout successful")


@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(
    req: RefreshTokenRequest,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """
    Issue a new bearer token without a password.

    Accepts either an identity service refresh token or a still-valid bearer
    token issued by this API.

    Raises:
        InvalidCredential: 401 if the presented token is rejected
    """
    identity, token, new_refresh_token = await verifier.refresh(req.refresh_token, issuer)

    return AuthResponse(
        message="Token refreshed successfully",
        user=_auth_user(identity),
        token=token,
        refresh_token=new_refresh_token,
    )


@router.get("/callback", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def auth_callback(
    code: str | None = None,
    code_verifier: str | None = None,
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> RedirectResponse:
    """
    Complete an OAuth sign in.

    Exchanges the authorization code for an identity service session, issues
    a bearer token and redirects to the frontend dashboard with both tokens
    in the query string.

    Raises:
        ValidationError: 400 if no code is provided
        CallbackFailed: 400 if the code exchange is rejected
    """
    if not code:
        raise ValidationError("No authorization code provided")

    try:
        session = await provider.exchange_code_for_session(code, code_verifier)
    except IdentityProviderError as e:
        raise CallbackFailed(f"Authentication callback failed: {e}") from e

    token = issuer.issue(session.identity)
    logger.info(f"OAuth callback completed for user {session.identity.id}")

    query = {"token": token}
    if session.refresh_token:
        query["refresh_token"] = session.refresh_token
    redirect_url = f"{settings.frontend_url.rstrip('/')}/dashboard?{urlencode(query)}"
    return RedirectResponse(redirect_url, status_code=status.HTTP_302_FOUND)
