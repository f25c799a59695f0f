"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, ClientOptions, create_client

from photo_survey.adapters.supabase_auth_gateway import SupabaseAuthGateway
from photo_survey.adapters.supabase_photo_repository import (
    SupabasePhotoRepository,
    SupabaseRatingRepository,
)
from photo_survey.config import Settings
from photo_survey.services.registry import SessionRegistry
from photo_survey.services.sessions import RatingSession
from photo_survey.services.storage import public_url_builder

ClientFactory = Callable[[], Client]


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sessions: SessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def supabase_client_factory(url: str, key: str) -> ClientFactory:
    """Return a factory for isolated, non-persisting Supabase clients."""

    def factory() -> Client:
        return create_client(
            url,
            key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )

    return factory


def session_factory(
    settings: Settings, client_factory: ClientFactory
) -> Callable[[], RatingSession]:
    """Return a factory building one rating session per visitor."""
    photo_url = public_url_builder(settings.supabase_url, settings.supabase_bucket)

    def factory() -> RatingSession:
        client = client_factory()
        return RatingSession(
            auth=SupabaseAuthGateway(client),
            photos=SupabasePhotoRepository(client),
            ratings=SupabaseRatingRepository(client),
            photo_url=photo_url,
            password_reset_redirect=settings.password_reset_redirect,
            max_ratings=settings.max_ratings_per_photo,
        )

    return factory


def build_container(
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_factory = client_factory or supabase_client_factory(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    registry = SessionRegistry(
        session_factory(resolved_settings, resolved_factory),
        max_entries=resolved_settings.max_visitor_sessions,
    )

    async def close_resources() -> None:
        registry.clear()

    return AppContainer(
        settings=resolved_settings,
        sessions=registry,
        close_resources=close_resources,
    )
