"""User profile endpoints and profile store adapter."""

from src.tracker.features.profile.handlers import router

__all__ = ["router"]
