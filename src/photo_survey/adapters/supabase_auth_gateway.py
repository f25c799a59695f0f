"""Supabase Auth-backed identity gateway."""

from dataclasses import dataclass

from supabase import Client

from photo_survey.adapters.supabase_errors import remote_call
from photo_survey.domain.errors import RemoteCallError
from photo_survey.domain.models import AuthSession
from photo_survey.services.auth import AuthGateway


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Supabase implementation of the identity provider calls."""

    client: Client

    def sign_up(self, email: str, password: str) -> AuthSession | None:
        """Register an account."""
        with remote_call():
            response = self.client.auth.sign_up({"email": email, "password": password})
        return _to_auth_session(response.session)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        with remote_call():
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        return _require_session(response.session, "Sign in did not return a session")

    def sign_out(self) -> None:
        """Sign out of Supabase Auth."""
        with remote_call():
            self.client.auth.sign_out()

    def get_session(self) -> AuthSession | None:
        """Return the client's session, refreshed by supabase-py once expired.

        A refresh re-issues the Authorization header used by table and RPC calls.
        """
        with remote_call():
            session = self.client.auth.get_session()
        return _to_auth_session(session)

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """Adopt a session from link tokens."""
        with remote_call():
            response = self.client.auth.set_session(access_token, refresh_token)
        return _require_session(response.session, "Link did not contain a session")

    def verify_recovery(self, token_hash: str) -> AuthSession:
        """Verify a recovery token hash."""
        with remote_call():
            response = self.client.auth.verify_otp(
                {"token_hash": token_hash, "type": "recovery"}
            )
        return _require_session(response.session, "Recovery link did not verify")

    def send_password_reset(self, email: str, redirect_url: str) -> None:
        """Send the recovery email."""
        options = {"redirect_to": redirect_url} if redirect_url else {}
        with remote_call():
            self.client.auth.reset_password_for_email(email, options)

    def update_password(self, password: str) -> None:
        """Update the signed-in user's password."""
        with remote_call():
            self.client.auth.update_user({"password": password})


def _to_auth_session(session: object | None) -> AuthSession | None:
    if session is None:
        return None
    user = getattr(session, "user", None)
    if user is None:
        return None
    return AuthSession(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
    )


def _require_session(session: object | None, message: str) -> AuthSession:
    resolved = _to_auth_session(session)
    if resolved is None:
        raise RemoteCallError(message)
    return resolved
