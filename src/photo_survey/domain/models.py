"""Domain models for the photo survey."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Photo:
    """A catalogued image in the storage bucket."""

    id: str
    storage_path: str


@dataclass(frozen=True)
class AuthSession:
    """Signed-in identity held by a visitor."""

    user_id: str
    email: str | None
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RatingRecord:
    """A rating row keyed by (user_id, photo_id)."""

    user_id: str
    photo_id: str
    wealth_score: int
    wealth_rationale: str | None
    relevance_score: int
    relevance_rationale: str | None

    def as_row(self) -> dict[str, object]:
        """Return the payload written to the scores table."""
        return {
            "user_id": self.user_id,
            "photo_id": self.photo_id,
            "wealth_score": self.wealth_score,
            "wealth_rationale": self.wealth_rationale,
            "relevance_score": self.relevance_score,
            "relevance_rationale": self.relevance_rationale,
        }
