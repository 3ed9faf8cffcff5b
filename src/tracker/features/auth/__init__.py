"""Signup, login, logout, token refresh and OAuth callback endpoints."""

from src.tracker.features.auth.handlers import router

__all__ = ["router"]
