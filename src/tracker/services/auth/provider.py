"""Identity service adapter over Supabase Auth."""

import logging
from functools import lru_cache
from typing import Any, Callable

import httpx
from fastapi.concurrency import run_in_threadpool
from supabase import AuthError, Client

from src.tracker.services.auth.models import AuthSession, Identity
from src.tracker.services.database.connection import (
    create_auth_client,
    get_supabase_admin_client,
)

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Raised when the identity service rejects or fails an operation."""

    pass


def _identity_from_user(user: Any) -> Identity:
    if user is None or not getattr(user, "id", None):
        raise IdentityProviderError("User information not available")
    if not getattr(user, "email", None):
        raise IdentityProviderError("User has no email address")
    return Identity(id=str(user.id), email=user.email)


def _session_from_response(response: Any) -> AuthSession:
    session = getattr(response, "session", None)
    return AuthSession(
        identity=_identity_from_user(getattr(response, "user", None)),
        refresh_token=session.refresh_token if session else None,
    )


class SupabaseIdentityProvider:
    """
    Delegates credential handling to Supabase Auth.

    The Supabase SDK is synchronous, so every call runs in the worker thread
    pool and the handler awaiting it is suspended rather than blocking the
    event loop. Each user-facing operation gets its own auth client from
    ``client_factory``; admin lookups share the service-role client.

    SDK ``AuthError``s and transport failures (``httpx.HTTPError``) are
    translated into ``IdentityProviderError`` so callers never depend on SDK
    exception types.

    Attributes:
        client_factory: Callable returning a fresh anon-key Supabase client
        admin_client: Service-role Supabase client

    Example:
        >>> provider = SupabaseIdentityProvider()
        >>> session = await provider.sign_in_with_password("a@x.com", "pw123456")
        >>> session.identity.id
    """

    def __init__(
        self,
        client_factory: Callable[[], Client] = create_auth_client,
        admin_client: Client | None = None,
    ):
        self.client_factory = client_factory
        self._admin_client = admin_client

    @property
    def admin_client(self) -> Client:
        if self._admin_client is None:
            self._admin_client = get_supabase_admin_client()
        return self._admin_client

    async def _call(self, operation: str, fn: Callable[[], Any]) -> Any:
        try:
            return await run_in_threadpool(fn)
        except AuthError as e:
            logger.warning(
                f"Identity service {operation} failed: {e.message}",
                extra={"error_type": f"identity_{operation}_failed"},
            )
            raise IdentityProviderError(e.message) from e
        except httpx.HTTPError as e:
            logger.warning(
                f"Identity service {operation} unreachable: {e}",
                extra={"error_type": f"identity_{operation}_unreachable"},
            )
            raise IdentityProviderError(f"Identity service unavailable: {e}") from e

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthSession:
        """
        Create an account.

        Args:
            email: Account email
            password: Account password (never stored by this API)
            metadata: User metadata stored alongside the account

        Returns:
            Session for the new account. ``refresh_token`` is None when the
            project requires email confirmation before sign in.
        """
        client = self.client_factory()
        response = await self._call(
            "sign_up",
            lambda: client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata or {}}}
            ),
        )
        return _session_from_response(response)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Verify an email/password pair and open a session."""
        client = self.client_factory()
        response = await self._call(
            "sign_in",
            lambda: client.auth.sign_in_with_password({"email": email, "password": password}),
        )
        return _session_from_response(response)

    async def sign_out(self, refresh_token: str | None = None) -> None:
        """
        Sign out, revoking the refresh token's session when one is given.

        Bearer tokens issued by this API are stateless and stay valid until
        they expire; only the identity service session is revoked.
        """
        client = self.client_factory()

        def _sign_out() -> None:
            if refresh_token:
                client.auth.refresh_session(refresh_token)
            client.auth.sign_out()

        await self._call("sign_out", _sign_out)

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new session (rotating the refresh token)."""
        client = self.client_factory()
        response = await self._call(
            "refresh_session", lambda: client.auth.refresh_session(refresh_token)
        )
        return _session_from_response(response)

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None = None
    ) -> AuthSession:
        """Exchange an OAuth authorization code for a session."""
        client = self.client_factory()
        params: dict[str, Any] = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        response = await self._call(
            "exchange_code", lambda: client.auth.exchange_code_for_session(params)
        )
        return _session_from_response(response)

    async def get_user_by_id(self, user_id: str) -> Identity:
        """Look up an account by ID with the service-role client."""
        response = await self._call(
            "get_user", lambda: self.admin_client.auth.admin.get_user_by_id(user_id)
        )
        return _identity_from_user(getattr(response, "user", None))

    async def update_user_metadata(self, user_id: str, metadata: dict[str, Any]) -> None:
        """Merge fields into an account's user metadata."""
        await self._call(
            "update_user",
            lambda: self.admin_client.auth.admin.update_user_by_id(
                user_id, {"user_metadata": metadata}
            ),
        )


@lru_cache(maxsize=1)
def get_identity_provider() -> SupabaseIdentityProvider:
    """FastAPI dependency returning the shared identity provider."""
    return SupabaseIdentityProvider()
