"""Bearer token issuance and verification (HMAC-SHA256 JWTs)."""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from src.tracker.config import Settings
from src.tracker.exceptions import InvalidCredential
from src.tracker.services.auth.models import Identity

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=7)


def resolve_signing_secret(settings: Settings) -> str:
    """
    Return the bearer token signing secret for this process.

    A configured ``JWT_SECRET`` always wins. Without one, production refuses
    to start; any other environment gets an ephemeral random secret, so
    tokens do not survive a restart.

    Args:
        settings: Application settings

    Returns:
        Signing secret

    Raises:
        RuntimeError: If no secret is configured in production
    """
    if settings.jwt_secret:
        return settings.jwt_secret

    if settings.is_production:
        raise RuntimeError("JWT_SECRET must be set when ENVIRONMENT=production")

    logger.warning(
        "Using generated fallback JWT secret. Set JWT_SECRET in .env for production!",
        extra={"environment": settings.environment},
    )
    return secrets.token_hex(64)


class TokenIssuer:
    """
    Issues and verifies the API's own bearer tokens.

    Tokens carry a fixed claim set ``{id, email, iat, exp}``, are signed with
    HS256 and expire seven days after issuance. There is no server-side
    state: a token is valid exactly when its signature and expiry check out.

    Attributes:
        leeway: Clock skew tolerance in seconds applied to ``exp``

    Example:
        >>> issuer = TokenIssuer(secret="s3cret")
        >>> token = issuer.issue(Identity(id="user-1", email="a@x.com"))
        >>> issuer.verify(token).email
        'a@x.com'
    """

    def __init__(self, secret: str, leeway: int = 0):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.leeway = leeway

    def issue(self, identity: Identity) -> str:
        """
        Sign a new bearer token for an identity.

        Args:
            identity: Identity confirmed by the identity service

        Returns:
            Encoded JWT
        """
        if not identity.id or not identity.email:
            raise ValueError("Identity id and email are required to issue a token")

        issued_at = datetime.now(timezone.utc)
        claims = {
            "id": identity.id,
            "email": identity.email,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME,
        }
        return jwt.encode(claims, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: str) -> Identity:
        """
        Verify a bearer token and return the identity it carries.

        Args:
            token: Encoded JWT (without the "Bearer " prefix)

        Returns:
            Identity decoded from the token claims

        Raises:
            InvalidCredential: If the signature, algorithm or expiry check
                fails, or the claims do not hold an identity. The message is
                the same in every case.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": False,
                    "require_exp": True,
                    "leeway": self.leeway,
                },
            )
            return Identity(id=claims.get("id"), email=claims.get("email"))

        except (JWTError, PydanticValidationError) as e:
            logger.warning(
                f"Bearer token verification failed: {e}",
                extra={"error_type": "token_verification_failed"},
            )
            raise InvalidCredential() from e

    def refresh(self, token: str) -> tuple[Identity, str]:
        """
        Re-issue a still-valid bearer token with a fresh expiry.

        Args:
            token: Existing bearer token

        Returns:
            The identity from the old token and the newly signed token

        Raises:
            InvalidCredential: If the presented token does not verify
        """
        identity = self.verify(token)
        return identity, self.issue(identity)
