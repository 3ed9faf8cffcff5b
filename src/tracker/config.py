"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # System Configuration
    environment: str = "development"
    debug: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    frontend_url: str = "http://localhost:5001"

    # Supabase Configuration
    supabase_url: str = "https://test.supabase.co"
    supabase_anon_key: str = "test-anon-key"
    supabase_service_role_key: str = "test-service-role-key"
    profiles_table: str = "user_profiles"

    # Bearer Token Configuration
    jwt_secret: str | None = None
    jwt_leeway_seconds: int = 0  # Clock skew tolerance

    # PostHog Configuration
    posthog_api_key: str | None = None
    posthog_host: str = "https://app.posthog.com"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
