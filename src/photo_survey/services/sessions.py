"""Rating session state machine.

One ``RatingSession`` exists per visitor. It owns the visitor's identity,
the single current photo and the rating draft, and moves between the states
below in response to user actions:

    signed_out -> awaiting_rating | exhausted       (sign in, restored session)
    any        -> password_reset_pending            (recovery link)
    awaiting_rating -> submitting -> awaiting_rating | exhausted
    exhausted  -> awaiting_rating | exhausted       (explicit check_again)
    any        -> signed_out                        (sign out)

Remote failures never move the machine forward: the message is kept on the
session and the pre-call state is restored.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from functools import wraps

from photo_survey.domain.auth_intent import (
    ErrorToken,
    NoIntent,
    RecoveryToken,
    parse_auth_intent,
)
from photo_survey.domain.errors import (
    InvalidTransitionError,
    RemoteCallError,
    SurveyValidationError,
)
from photo_survey.domain.models import AuthSession, Photo
from photo_survey.domain.ratings import (
    Dimension,
    RatingDraft,
    parse_dimension,
    validate_email,
    validate_new_password,
)
from photo_survey.services.auth import AuthGateway
from photo_survey.services.photos import (
    DEFAULT_MAX_RATINGS,
    PhotoRepository,
    RatingRepository,
)

_logger = logging.getLogger(__name__)

SIGN_UP_NOTICE = (
    "Sign up successful. If email confirmation is enabled, confirm then sign in."
)
RESET_SENT_NOTICE = "If an account exists for that email, a reset link is on its way."
RESET_READY_NOTICE = "Choose a new password."
RESET_INVALID_NOTICE = (
    "This reset link is invalid or expired. Please request a new password reset email."
)
RESET_FAILED_NOTICE = "Could not open reset session."
PASSWORD_UPDATED_NOTICE = "Password updated. Sign in with your new password."
LINK_ERROR_FALLBACK = "This link is invalid or has expired."
SESSION_EXPIRED_ERROR = "Your session has expired. Please sign in again."


class SessionState(StrEnum):
    """States of a visitor's rating session."""

    SIGNED_OUT = "signed_out"
    PASSWORD_RESET_PENDING = "password_reset_pending"
    LOADING_PHOTO = "loading_photo"
    AWAITING_RATING = "awaiting_rating"
    SUBMITTING = "submitting"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class SessionView:
    """Snapshot of a session rendered by the page."""

    state: SessionState
    email: str | None
    photo: Photo | None
    photo_url: str | None
    draft: RatingDraft
    can_submit: bool
    missing: list[str]
    busy: bool
    error: str | None
    notice: str | None
    reset_ready: bool

    @classmethod
    def signed_out(cls) -> "SessionView":
        """View of a visitor that has no session yet."""
        return cls(
            state=SessionState.SIGNED_OUT,
            email=None,
            photo=None,
            photo_url=None,
            draft=RatingDraft.blank(),
            can_submit=False,
            missing=[],
            busy=False,
            error=None,
            notice=None,
            reset_ready=False,
        )

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "state": self.state.value,
            "email": self.email,
            "photo": (
                {
                    "id": self.photo.id,
                    "storage_path": self.photo.storage_path,
                    "url": self.photo_url,
                }
                if self.photo
                else None
            ),
            "draft": {
                dimension.value: {
                    "score": self.draft.score(dimension),
                    "rationale": self.draft.rationale(dimension),
                    "neutral_default": dimension.neutral_default,
                    "label": dimension.label,
                }
                for dimension in Dimension
            },
            "can_submit": self.can_submit,
            "missing": self.missing,
            "busy": self.busy,
            "error": self.error,
            "notice": self.notice,
            "reset_ready": self.reset_ready,
        }


def _operation(method: Callable[..., None]) -> Callable[..., SessionView]:
    """Run a session action under the busy lock and return the new view."""

    @wraps(method)
    def wrapper(self: "RatingSession", *args: object, **kwargs: object) -> SessionView:
        if not self._lock.acquire(blocking=False):
            raise InvalidTransitionError("Another request is still in progress.")
        self.error = None
        self.notice = None
        try:
            method(self, *args, **kwargs)
        except SurveyValidationError as exc:
            self.error = str(exc)
            raise
        finally:
            self._lock.release()
        return self.view()

    return wrapper


@dataclass
class RatingSession:
    """State machine for one visitor's survey session."""

    auth: AuthGateway
    photos: PhotoRepository
    ratings: RatingRepository
    photo_url: Callable[[str], str]
    password_reset_redirect: str = ""
    max_ratings: int = DEFAULT_MAX_RATINGS
    state: SessionState = SessionState.SIGNED_OUT
    identity: AuthSession | None = None
    photo: Photo | None = None
    draft: RatingDraft = field(default_factory=RatingDraft.blank)
    error: str | None = None
    notice: str | None = None
    reset_ready: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def busy(self) -> bool:
        """True while a remote call is in flight."""
        return self._lock.locked()

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if self.identity else None

    @property
    def can_submit(self) -> bool:
        """Whether the current draft may be submitted."""
        if self.state is not SessionState.AWAITING_RATING:
            return False
        if self.user_id is None or self.photo is None:
            return False
        return self.draft.is_complete()

    def view(self) -> SessionView:
        """Return a snapshot of the session."""
        return SessionView(
            state=self.state,
            email=self.identity.email if self.identity else None,
            photo=self.photo,
            photo_url=self.photo_url(self.photo.storage_path) if self.photo else None,
            draft=self.draft,
            can_submit=self.can_submit,
            missing=self.draft.missing_inputs() if self.photo else [],
            busy=self.busy,
            error=self.error,
            notice=self.notice,
            reset_ready=self.reset_ready,
        )

    @_operation
    def start(self, url: str | None) -> None:
        """Route a page load; recovery links win over any existing session."""
        intent = parse_auth_intent(url)
        if isinstance(intent, RecoveryToken):
            self._enter_recovery(intent)
        elif isinstance(intent, ErrorToken):
            if self.identity is None:
                self._clear()
            self.error = intent.description or LINK_ERROR_FALLBACK
        else:
            self._restore(intent)

    @_operation
    def sign_up(self, email: str, password: str) -> None:
        """Create an account."""
        self._require(SessionState.SIGNED_OUT)
        cleaned = validate_email(email)
        validate_new_password(password)
        try:
            identity = self.auth.sign_up(cleaned, password)
        except RemoteCallError as exc:
            self._fail("sign up", exc, SessionState.SIGNED_OUT)
            return
        if identity is None:
            self.notice = SIGN_UP_NOTICE
            return
        self.identity = identity
        self._load_next_photo(fallback=SessionState.AWAITING_RATING)

    @_operation
    def sign_in(self, email: str, password: str) -> None:
        """Sign in with credentials and serve the first photo."""
        self._require(SessionState.SIGNED_OUT)
        cleaned = validate_email(email)
        if not password:
            raise SurveyValidationError("Password is required.")
        try:
            self.identity = self.auth.sign_in(cleaned, password)
        except RemoteCallError as exc:
            self._fail("sign in", exc, SessionState.SIGNED_OUT)
            return
        _logger.info("Signed in: user_id=%s", self.user_id)
        self._load_next_photo(fallback=SessionState.AWAITING_RATING)

    @_operation
    def sign_out(self) -> None:
        """Sign out from any state and drop all local state."""
        self._sign_out_remote()
        self._clear()

    @_operation
    def request_password_reset(self, email: str) -> None:
        """Email a recovery link to the address."""
        self._require(SessionState.SIGNED_OUT)
        cleaned = validate_email(email)
        try:
            self.auth.send_password_reset(cleaned, self.password_reset_redirect)
        except RemoteCallError as exc:
            self._fail("password reset email", exc, SessionState.SIGNED_OUT)
            return
        self.notice = RESET_SENT_NOTICE

    @_operation
    def update_password(self, password: str, confirmation: str) -> None:
        """Complete a password reset."""
        self._require(SessionState.PASSWORD_RESET_PENDING)
        if not self.reset_ready:
            raise InvalidTransitionError("No valid reset session.")
        validate_new_password(password, confirmation)
        try:
            self.auth.update_password(password)
        except RemoteCallError as exc:
            self._fail("password update", exc, SessionState.PASSWORD_RESET_PENDING)
            return
        self._sign_out_remote()
        self._clear()
        self.notice = PASSWORD_UPDATED_NOTICE

    @_operation
    def cancel_password_reset(self) -> None:
        """Abandon a password reset and return to sign-in."""
        self._require(SessionState.PASSWORD_RESET_PENDING)
        self._sign_out_remote()
        self._clear()

    @_operation
    def set_score(self, dimension: str, value: object) -> None:
        """Select a score for a dimension of the current photo."""
        self._require_photo()
        self.draft = self.draft.with_score(parse_dimension(dimension), value)

    @_operation
    def set_rationale(self, dimension: str, text: str) -> None:
        """Replace the rationale text for a dimension."""
        self._require_photo()
        self.draft = self.draft.with_rationale(parse_dimension(dimension), text)

    @_operation
    def submit(self) -> None:
        """Save the rating and advance to the next photo."""
        self._require_photo()
        if self.user_id is None or self.photo is None:
            raise InvalidTransitionError("Not signed in.")
        record = self.draft.to_record(self.user_id, self.photo.id)
        if not self._refresh_identity(fallback=SessionState.AWAITING_RATING):
            return
        self.state = SessionState.SUBMITTING
        try:
            self.ratings.upsert_rating(record)
        except RemoteCallError as exc:
            self._fail("submit rating", exc, SessionState.AWAITING_RATING)
            return
        _logger.info(
            "Rating saved: user_id=%s photo_id=%s", record.user_id, record.photo_id
        )
        # A rated photo is never current again, even if the next load fails.
        self.photo = None
        self.draft = RatingDraft.blank()
        self._load_next_photo(fallback=SessionState.AWAITING_RATING)

    @_operation
    def check_again(self) -> None:
        """Ask for an eligible photo again after running out or a failed load."""
        if self.user_id is None:
            raise InvalidTransitionError("Not signed in.")
        if self.state is SessionState.EXHAUSTED or (
            self.state is SessionState.AWAITING_RATING and self.photo is None
        ):
            fallback = self.state
            if self._refresh_identity(fallback=fallback):
                self._load_next_photo(fallback=fallback)
            return
        raise InvalidTransitionError(
            f"Cannot look for photos while {self.state.value}."
        )

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise InvalidTransitionError(
                f"Expected {state.value}, session is {self.state.value}."
            )

    def _require_photo(self) -> None:
        self._require(SessionState.AWAITING_RATING)
        if self.photo is None:
            raise InvalidTransitionError("No photo is being rated.")

    def _fail(self, action: str, exc: RemoteCallError, state: SessionState) -> None:
        _logger.warning("Remote call failed: action=%s error=%s", action, exc)
        self.error = str(exc)
        self.state = state

    def _restore(self, intent: NoIntent) -> None:
        if self.state is SessionState.PASSWORD_RESET_PENDING:
            return
        if self.identity is not None and self.state is not SessionState.SIGNED_OUT:
            return
        try:
            if intent.has_tokens:
                identity = self.auth.set_session(
                    intent.access_token or "", intent.refresh_token or ""
                )
            else:
                identity = self.auth.get_session()
        except RemoteCallError as exc:
            self._fail("restore session", exc, SessionState.SIGNED_OUT)
            return
        if identity is None:
            self.state = SessionState.SIGNED_OUT
            return
        self.identity = identity
        self._load_next_photo(fallback=SessionState.AWAITING_RATING)

    def _enter_recovery(self, intent: RecoveryToken) -> None:
        self.photo = None
        self.draft = RatingDraft.blank()
        self.state = SessionState.PASSWORD_RESET_PENDING
        self.reset_ready = False
        try:
            if intent.has_session_tokens:
                identity = self.auth.set_session(
                    intent.access_token or "", intent.refresh_token or ""
                )
            elif intent.token_hash:
                identity = self.auth.verify_recovery(intent.token_hash)
            else:
                identity = self.auth.get_session()
        except RemoteCallError as exc:
            self._fail("open reset session", exc, SessionState.PASSWORD_RESET_PENDING)
            self.notice = RESET_FAILED_NOTICE
            return
        if identity is None:
            self.notice = RESET_INVALID_NOTICE
            return
        self.identity = identity
        self.reset_ready = True
        self.notice = RESET_READY_NOTICE

    def _refresh_identity(self, fallback: SessionState) -> bool:
        """Renew an expired access token before a data call.

        Returns False when the call must not go ahead; the session has then
        either recorded the error or been signed out.
        """
        try:
            identity = self.auth.get_session()
        except RemoteCallError as exc:
            self._fail("refresh session", exc, fallback)
            return False
        if identity is None:
            _logger.info("Session expired: user_id=%s", self.user_id)
            self._clear()
            self.error = SESSION_EXPIRED_ERROR
            return False
        self.identity = identity
        return True

    def _load_next_photo(self, fallback: SessionState) -> None:
        if self.user_id is None:
            raise InvalidTransitionError("Not signed in.")
        self.state = SessionState.LOADING_PHOTO
        try:
            photo = self.photos.next_eligible_photo(self.user_id, self.max_ratings)
        except RemoteCallError as exc:
            self._fail("load photo", exc, fallback)
            return
        self.photo = photo
        self.draft = RatingDraft.blank()
        if photo is None:
            _logger.info("No eligible photos: user_id=%s", self.user_id)
            self.state = SessionState.EXHAUSTED
            return
        self.state = SessionState.AWAITING_RATING

    def _sign_out_remote(self) -> None:
        try:
            self.auth.sign_out()
        except RemoteCallError as exc:
            _logger.warning("Remote sign out failed: %s", exc)

    def _clear(self) -> None:
        self.identity = None
        self.photo = None
        self.draft = RatingDraft.blank()
        self.reset_ready = False
        self.state = SessionState.SIGNED_OUT
