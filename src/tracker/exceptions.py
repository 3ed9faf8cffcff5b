"""API error taxonomy.

Every error that reaches a client is an ``ApiError`` subclass. The exception
handlers registered in ``main.py`` render them as ``{"message", "error"}``
where ``error`` is the class name.
"""

from fastapi import status


class ApiError(Exception):
    """Base exception for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unknown error occurred"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationError(ApiError):
    """Raised when request input has the wrong shape or content."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class SignupFailed(ApiError):
    """Raised when the identity service rejects account creation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Signup failed"


class LogoutFailed(ApiError):
    """Raised when the identity service rejects a sign out."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Logout failed"


class CallbackFailed(ApiError):
    """Raised when an OAuth authorization code cannot be exchanged."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Authentication callback failed"


class AuthenticationFailed(ApiError):
    """Raised when the identity service rejects email/password credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Login failed"


class CredentialError(ApiError):
    """Base exception for bearer token problems."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class MissingCredential(CredentialError):
    """Raised when the Authorization header is absent."""

    default_message = "No token provided"


class MalformedCredential(CredentialError):
    """Raised when the Authorization header is not ``Bearer <token>``."""

    default_message = "Invalid token format"


class InvalidCredential(CredentialError):
    """Raised when a token fails signature, algorithm or expiry checks."""

    default_message = "Invalid or expired token"


class IdentityMismatch(CredentialError):
    """Raised when the token identity is not confirmed by the identity service."""

    default_message = "Token identity could not be confirmed"


class ProfileNotFound(ApiError):
    """Raised when no profile row exists for the user."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User profile not found"


class ProfileCreationFailed(ApiError):
    """Raised when the profile row cannot be created after signup."""

    default_message = "Account created but profile creation failed"


class ProfileUpdateFailed(ApiError):
    """Raised when the profile store rejects an update."""

    default_message = "Profile update failed"


class ProfileFetchFailed(ApiError):
    """Raised when the profile store cannot be read."""

    default_message = "Error fetching user profile"


class UnknownError(ApiError):
    """Catch-all for unexpected failures."""

    default_message = "Internal server error"
