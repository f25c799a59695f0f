"""Photo eligibility and rating persistence interfaces."""

from typing import Protocol

from photo_survey.domain.models import Photo, RatingRecord

DEFAULT_MAX_RATINGS = 20


class PhotoRepository(Protocol):
    """Source of the next photo a user should rate."""

    def next_eligible_photo(self, user_id: str, max_ratings: int) -> Photo | None:
        """Return one photo the user has not rated and that is under max_ratings."""


class RatingRepository(Protocol):
    """Persistence interface for ratings."""

    def upsert_rating(self, record: RatingRecord) -> None:
        """Insert or overwrite the rating keyed by (user_id, photo_id)."""
