"""Identity provider interface."""

from typing import Protocol

from photo_survey.domain.models import AuthSession


class AuthGateway(Protocol):
    """Interface for the remote identity provider.

    Implementations raise ``RemoteCallError`` with the provider's message.
    """

    def sign_up(self, email: str, password: str) -> AuthSession | None:
        """Register an account; returns a session when no confirmation is needed."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""

    def sign_out(self) -> None:
        """End the current session."""

    def get_session(self) -> AuthSession | None:
        """Return the current session, renewing an expired access token."""

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """Adopt a session from a token pair carried by a link."""

    def verify_recovery(self, token_hash: str) -> AuthSession:
        """Exchange a recovery token hash for a session."""

    def send_password_reset(self, email: str, redirect_url: str) -> None:
        """Email a recovery link that lands on redirect_url."""

    def update_password(self, password: str) -> None:
        """Set a new password for the signed-in user."""
