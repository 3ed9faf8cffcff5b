"""Shared services module for external integrations."""

from src.tracker.services.analytics.posthog import PostHogService

__all__ = [
    "PostHogService",
]
