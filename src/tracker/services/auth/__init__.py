"""Bearer token authentication backed by the Supabase identity service."""

from src.tracker.services.auth.dependencies import (
    get_confirmed_user,
    get_current_user,
    get_token_issuer,
)
from src.tracker.services.auth.models import AuthSession, Identity
from src.tracker.services.auth.provider import (
    IdentityProviderError,
    SupabaseIdentityProvider,
    get_identity_provider,
)
from src.tracker.services.auth.tokens import TokenIssuer, resolve_signing_secret

__all__ = [
    "get_confirmed_user",
    "get_current_user",
    "get_token_issuer",
    "get_identity_provider",
    "AuthSession",
    "Identity",
    "IdentityProviderError",
    "SupabaseIdentityProvider",
    "TokenIssuer",
    "resolve_signing_secret",
]
