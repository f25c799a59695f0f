"""JSON API driven by the survey page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, Response

from photo_survey.api.models import (
    CredentialsRequest,
    EmailRequest,
    NewPasswordRequest,
    RationaleRequest,
    ScoreRequest,
    StartRequest,
)
from photo_survey.services.sessions import RatingSession, SessionView

if TYPE_CHECKING:
    from photo_survey.containers import AppContainer

SESSION_COOKIE = "survey_sid"

router = APIRouter(prefix="/api", tags=["survey"])


def visitor_session(request: Request, response: Response) -> RatingSession:
    """Return the caller's rating session, issuing a cookie for new visitors."""
    container: AppContainer = request.app.state.container
    current = request.cookies.get(SESSION_COOKIE)
    visitor_id, session = container.sessions.get_or_create(current)
    if visitor_id != current:
        response.set_cookie(
            SESSION_COOKIE,
            visitor_id,
            httponly=True,
            samesite="lax",
            secure=container.settings.cookie_secure,
        )
    return session


def known_session(request: Request) -> RatingSession | None:
    """Return the caller's rating session without registering new visitors."""
    container: AppContainer = request.app.state.container
    return container.sessions.find(request.cookies.get(SESSION_COOKIE))


@router.get("/session")
def current_view(
    session: RatingSession | None = Depends(known_session),
) -> dict[str, object]:
    """Return the session as it stands."""
    if session is None:
        return SessionView.signed_out().as_dict()
    return session.view().as_dict()


@router.post("/session/start")
def start(
    body: StartRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Route the landing URL before anything else happens."""
    return session.start(body.url).as_dict()


@router.post("/auth/sign-up")
def sign_up(
    body: CredentialsRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Create an account."""
    return session.sign_up(body.email, body.password).as_dict()


@router.post("/auth/sign-in")
def sign_in(
    body: CredentialsRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Sign in and load the first photo."""
    return session.sign_in(body.email, body.password).as_dict()


@router.post("/auth/sign-out")
def sign_out(session: RatingSession = Depends(visitor_session)) -> dict[str, object]:
    """Sign out."""
    return session.sign_out().as_dict()


@router.post("/auth/forgot")
def forgot_password(
    body: EmailRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Send a password recovery email."""
    return session.request_password_reset(body.email).as_dict()


@router.post("/auth/password")
def update_password(
    body: NewPasswordRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Finish a password reset."""
    return session.update_password(body.password, body.confirmation).as_dict()


@router.post("/auth/reset/cancel")
def cancel_reset(
    session: RatingSession = Depends(visitor_session),
) -> dict[str, object]:
    """Abandon a password reset."""
    return session.cancel_password_reset().as_dict()


@router.post("/ratings/score")
def set_score(
    body: ScoreRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Select a score."""
    return session.set_score(body.dimension, body.value).as_dict()


@router.post("/ratings/rationale")
def set_rationale(
    body: RationaleRequest, session: RatingSession = Depends(visitor_session)
) -> dict[str, object]:
    """Update a rationale."""
    return session.set_rationale(body.dimension, body.text).as_dict()


@router.post("/ratings/submit")
def submit(session: RatingSession = Depends(visitor_session)) -> dict[str, object]:
    """Save the rating and move on."""
    return session.submit().as_dict()


@router.post("/photos/next")
def check_again(
    session: RatingSession = Depends(visitor_session),
) -> dict[str, object]:
    """Look for an eligible photo again."""
    return session.check_again().as_dict()
