"""Pydantic models for survey API payloads."""

from pydantic import BaseModel


class StartRequest(BaseModel):
    """Landing URL as seen by the browser, fragment included."""

    url: str | None = None


class CredentialsRequest(BaseModel):
    """Email and password form."""

    email: str
    password: str


class EmailRequest(BaseModel):
    """Password reset request form."""

    email: str


class NewPasswordRequest(BaseModel):
    """New password form."""

    password: str
    confirmation: str


class ScoreRequest(BaseModel):
    """Slider change."""

    dimension: str
    value: int


class RationaleRequest(BaseModel):
    """Rationale text change."""

    dimension: str
    text: str
