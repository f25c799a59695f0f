"""Supabase-backed photo eligibility and rating repositories."""

from dataclasses import dataclass

from supabase import Client

from photo_survey.adapters.supabase_errors import remote_call
from photo_survey.domain.errors import RemoteCallError
from photo_survey.domain.models import Photo, RatingRecord
from photo_survey.services.photos import PhotoRepository, RatingRepository

NEXT_PHOTO_FUNCTION = "next_photo_for_user"
SCORES_TABLE = "user_photo_scores"


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Asks the database which photo a user should see next."""

    client: Client

    def next_eligible_photo(self, user_id: str, max_ratings: int) -> Photo | None:
        """Call the eligibility function and return its single row, if any."""
        with remote_call():
            response = self.client.rpc(
                NEXT_PHOTO_FUNCTION,
                {"p_user_id": user_id, "p_max_ratings": max_ratings},
            ).execute()
        data = response.data
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict) or not row.get("id"):
            return None
        return Photo(id=str(row["id"]), storage_path=str(row["storage_path"]))


@dataclass
class SupabaseRatingRepository(RatingRepository):
    """Supabase implementation for rating persistence."""

    client: Client

    def upsert_rating(self, record: RatingRecord) -> None:
        """Upsert a rating; a repeat for the same pair overwrites it."""
        with remote_call():
            response = (
                self.client.table(SCORES_TABLE)
                .upsert(record.as_row(), on_conflict="user_id,photo_id")
                .execute()
            )
        if not response.data:
            raise RemoteCallError("Failed to save rating")
