"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Web application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    supabase_bucket: str = "art_photos"
    supabase_folder: str = ""
    site_url: str = "http://localhost:8000"
    max_ratings_per_photo: int = 20
    max_visitor_sessions: int = 10_000
    cookie_secure: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def password_reset_redirect(self) -> str:
        """URL the recovery email should send users back to."""
        return f"{self.site_url.rstrip('/')}/reset"


class SyncSettings(BaseSettings):
    """Directory sync settings; uses the service role key."""

    supabase_url: str
    supabase_service_role_key: str
    supabase_bucket: str
    supabase_folder: str = ""

    model_config = SettingsConfigDict(
        env_file=(".env.sync", ".env"),
        extra="ignore",
    )
