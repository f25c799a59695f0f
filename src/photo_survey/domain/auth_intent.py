"""Inbound authentication intent carried by a landing URL.

Supabase recovery links land on the site with their parameters either in the
query string (``?token_hash=...&type=recovery``) or in the fragment
(``#access_token=...&refresh_token=...&type=recovery``). Failed links carry
``error``/``error_code``/``error_description`` instead.
"""

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlsplit

RESET_PATH = "/reset"
NOT_RECOVERY_CODE = "not_recovery"
NOT_RECOVERY_MESSAGE = "This link is not a password recovery link."


@dataclass(frozen=True)
class NoIntent:
    """Ordinary visit; session tokens may still be present for sign-in links."""

    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def has_tokens(self) -> bool:
        return bool(self.access_token and self.refresh_token)


@dataclass(frozen=True)
class RecoveryToken:
    """Password recovery link."""

    access_token: str | None = None
    refresh_token: str | None = None
    token_hash: str | None = None

    @property
    def has_session_tokens(self) -> bool:
        return bool(self.access_token and self.refresh_token)


@dataclass(frozen=True)
class ErrorToken:
    """Auth link the provider rejected, e.g. expired."""

    code: str | None
    description: str


AuthIntent = NoIntent | RecoveryToken | ErrorToken


def parse_auth_intent(url: str | None) -> AuthIntent:
    """Classify a landing URL once, before any other routing decision."""
    if not url:
        return NoIntent()
    parts = urlsplit(url)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    params.update(parse_qsl(parts.fragment, keep_blank_values=True))

    error = params.get("error")
    error_code = params.get("error_code")
    error_description = params.get("error_description")
    if error or error_code or error_description:
        return ErrorToken(
            code=error_code or error,
            description=error_description or error or error_code or "",
        )

    access_token = params.get("access_token") or None
    refresh_token = params.get("refresh_token") or None
    token_hash = params.get("token_hash") or None
    link_type = params.get("type")
    has_pair = bool(access_token and refresh_token)
    on_reset_page = parts.path.rstrip("/") == RESET_PATH

    if on_reset_page and link_type and link_type != "recovery":
        return ErrorToken(code=NOT_RECOVERY_CODE, description=NOT_RECOVERY_MESSAGE)
    is_recovery = link_type == "recovery" or (
        link_type is None and has_pair and on_reset_page
    )
    if is_recovery:
        return RecoveryToken(
            access_token=access_token,
            refresh_token=refresh_token,
            token_hash=token_hash,
        )
    if has_pair:
        return NoIntent(access_token=access_token, refresh_token=refresh_token)
    return NoIntent()
