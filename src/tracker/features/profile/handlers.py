"""API handlers for the user profile endpoints."""

import logging

from fastapi import APIRouter, Depends

from src.tracker.features.profile.models import (
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUser,
    UserProfile,
)
from src.tracker.features.profile.store import ProfileStore, get_profile_store
from src.tracker.services import PostHogService
from src.tracker.services.auth.dependencies import get_confirmed_user, get_current_user
from src.tracker.services.auth.models import Identity
from src.tracker.services.auth.provider import (
    IdentityProviderError,
    SupabaseIdentityProvider,
    get_identity_provider,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["profile"])


def _profile_user(identity: Identity, profile: UserProfile) -> ProfileUser:
    return ProfileUser(
        id=identity.id,
        email=identity.email,
        username=profile.username,
        first_name=profile.first_name or "",
        last_name=profile.last_name or "",
        favorite_teams=profile.favorite_teams,
        profile_pic_url=profile.profile_pic_url,
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: Identity = Depends(get_current_user),
    store: ProfileStore = Depends(get_profile_store),
) -> ProfileResponse:
    """
    Get the caller's profile.

    Args:
        current_user: Identity from the validated bearer token
        store: Profile store

    Returns:
        Profile merged with the caller's id and email

    Raises:
        ProfileNotFound: 404 if no profile row exists
        ProfileFetchFailed: 500 if the store cannot be read

    Example Response:
        {
            "message": "Profile retrieved successfully",
            "user": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "a@x.com",
                "username": "abc",
                "first_name": "",
                "last_name": "",
                "favorite_teams": [],
                "profile_pic_url": null
            }
        }
    """
    profile = await store.get(current_user.id)
    return ProfileResponse(
        message="Profile retrieved successfully",
        user=_profile_user(current_user, profile),
    )


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    req: ProfileUpdateRequest,
    current_user: Identity = Depends(get_confirmed_user),
    store: ProfileStore = Depends(get_profile_store),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
) -> ProfileResponse:
    """
    Partially update the caller's profile.

    The bearer token identity is confirmed with the identity service before
    the write. Name and team changes are mirrored into the account's user
    metadata; a failure there is logged and does not fail the request since
    the profile row is authoritative.

    Args:
        req: Fields to change (omitted or null fields are left as they are)
        current_user: Confirmed identity
        store: Profile store
        provider: Identity service adapter

    Returns:
        Updated profile

    Raises:
        ValidationError: 400 if the body is empty or favorite_teams is invalid
        ProfileNotFound: 404 if no profile row exists
        ProfileUpdateFailed: 500 if the store rejects the update
    """
    fields = req.model_dump(exclude_unset=True, exclude_none=True)
    profile = await store.update(current_user.id, fields)

    metadata = {
        key: value
        for key, value in fields.items()
        if key in ("username", "first_name", "last_name", "favorite_teams")
    }
    if metadata:
        try:
            await provider.update_user_metadata(current_user.id, metadata)
        except IdentityProviderError as e:
            logger.warning(
                f"Failed to mirror profile into user metadata for {current_user.id}: {e}",
                extra={"error_type": "metadata_sync_failed", "user_id": current_user.id},
            )

    posthog_service = PostHogService()
    posthog_service.capture(
        distinct_id=current_user.id,
        event="profile_updated",
        properties={"fields": sorted(fields)},
    )

    return ProfileResponse(
        message="Profile updated successfully",
        user=_profile_user(current_user, profile),
    )
