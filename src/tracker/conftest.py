"""Pytest configuration and shared fixtures."""

import copy
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.tracker.features.profile.store import ProfileStore, get_profile_store
from src.tracker.main import app
from src.tracker.services.auth.models import AuthSession, Identity
from src.tracker.services.auth.provider import IdentityProviderError, get_identity_provider
from src.tracker.services.auth.tokens import TokenIssuer


class FakeIdentityProvider:
    """In-memory stand-in for the Supabase identity service."""

    def __init__(self) -> None:
        self.accounts: dict[str, dict[str, Any]] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.auth_codes: dict[str, str] = {}
        self.signed_out: list[str | None] = []
        self.metadata_updates: list[tuple[str, dict[str, Any]]] = []
        self.confirmed_ids: dict[str, str] = {}
        self.fail_metadata_updates = False

    def _open_session(self, email: str) -> AuthSession:
        account = self.accounts[email]
        refresh_token = f"rt-{uuid4().hex}"
        self.refresh_tokens[refresh_token] = email
        return AuthSession(
            identity=Identity(id=account["id"], email=email), refresh_token=refresh_token
        )

    def add_account(self, email: str, password: str, user_id: str | None = None) -> Identity:
        account_id = user_id or str(uuid4())
        self.accounts[email] = {"id": account_id, "password": password, "metadata": {}}
        return Identity(id=account_id, email=email)

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthSession:
        if email in self.accounts:
            raise IdentityProviderError("User already registered")
        self.add_account(email, password)
        self.accounts[email]["metadata"] = dict(metadata or {})
        return self._open_session(email)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise IdentityProviderError("Invalid login credentials")
        return self._open_session(email)

    async def sign_out(self, refresh_token: str | None = None) -> None:
        if refresh_token is not None:
            if refresh_token not in self.refresh_tokens:
                raise IdentityProviderError("Invalid Refresh Token: Refresh Token Not Found")
            del self.refresh_tokens[refresh_token]
        self.signed_out.append(refresh_token)

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        email = self.refresh_tokens.pop(refresh_token, None)
        if email is None:
            raise IdentityProviderError("Invalid Refresh Token: Refresh Token Not Found")
        return self._open_session(email)

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None = None
    ) -> AuthSession:
        email = self.auth_codes.pop(code, None)
        if email is None:
            raise IdentityProviderError("invalid flow state, no valid flow state found")
        return self._open_session(email)

    async def get_user_by_id(self, user_id: str) -> Identity:
        for email, account in self.accounts.items():
            if account["id"] == user_id:
                return Identity(id=self.confirmed_ids.get(user_id, user_id), email=email)
        raise IdentityProviderError("User not found")

    async def update_user_metadata(self, user_id: str, metadata: dict[str, Any]) -> None:
        if self.fail_metadata_updates:
            raise IdentityProviderError("Database error updating user")
        self.metadata_updates.append((user_id, metadata))


class InMemoryProfileTable:
    """In-memory stand-in for SupabaseQueryBuilder over the profile table."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.fail_inserts = False
        self.update_calls = 0

    def get_by_field(
        self, table: str, field: str, value: Any, columns: str = "*"
    ) -> dict[str, Any] | None:
        for row in self.rows.values():
            if row.get(field) == value:
                return copy.deepcopy(row)
        return None

    def insert_record(self, table: str, data: dict[str, Any]) -> dict[str, Any] | None:
        if self.fail_inserts:
            raise RuntimeError("insert into user_profiles failed")
        row = {
            "id": str(uuid4()),
            "username": None,
            "first_name": None,
            "last_name": None,
            "favorite_teams": [],
            "profile_pic_url": None,
        }
        row.update(copy.deepcopy(data))
        self.rows[row["user_id"]] = row
        return copy.deepcopy(row)

    def update_by_filter(
        self, table: str, filters: dict[str, Any], data: dict[str, Any]
    ) -> list[dict[str, Any]]:
        self.update_calls += 1
        updated = []
        for row in self.rows.values():
            if all(row.get(field) == value for field, value in filters.items()):
                row.update(copy.deepcopy(data))
                updated.append(copy.deepcopy(row))
        return updated


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    """Provide an empty in-memory identity service."""
    return FakeIdentityProvider()


@pytest.fixture
def profile_table() -> InMemoryProfileTable:
    """Provide an empty in-memory profile table."""
    return InMemoryProfileTable()


@pytest.fixture
def profile_store(profile_table: InMemoryProfileTable) -> ProfileStore:
    """Provide a profile store over the in-memory table."""
    return ProfileStore(profile_table, table="user_profiles")


@pytest.fixture
def client(identity_provider: FakeIdentityProvider, profile_store: ProfileStore) -> TestClient:
    """
    Provide FastAPI test client with in-memory collaborators.

    The client is entered as a context manager so the lifespan runs and the
    token issuer is available on ``app.state``.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}


@pytest.fixture
def token_issuer(client: TestClient) -> TokenIssuer:
    """Provide the token issuer the running app verifies with."""
    return client.app.state.token_issuer


@pytest.fixture
def registered_user(
    identity_provider: FakeIdentityProvider, profile_table: InMemoryProfileTable
) -> Identity:
    """Provide an account with an existing profile row."""
    identity = identity_provider.add_account("fan@example.com", "pw123456")
    profile_table.insert_record(
        "user_profiles",
        {
            "user_id": identity.id,
            "username": "fan",
            "first_name": "Sam",
            "last_name": "Rivera",
            "favorite_teams": ["NYY"],
        },
    )
    return identity


@pytest.fixture
def auth_headers(token_issuer: TokenIssuer, registered_user: Identity) -> dict[str, str]:
    """Generate bearer auth headers for the registered user."""
    return {"Authorization": f"Bearer {token_issuer.issue(registered_user)}"}
