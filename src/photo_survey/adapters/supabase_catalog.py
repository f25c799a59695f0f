"""Supabase Storage listing and photo catalog writes for the sync job."""

from dataclasses import dataclass

from supabase import Client

from photo_survey.adapters.supabase_errors import remote_call
from photo_survey.services.sync import CatalogRepository, StorageLister

PHOTOS_TABLE = "photos"


@dataclass
class SupabaseStorageLister(StorageLister):
    """Lists one bucket through the Storage API."""

    client: Client
    bucket: str

    def list_page(
        self, prefix: str, limit: int, offset: int
    ) -> list[dict[str, object]]:
        """Return one page of entries under prefix."""
        with remote_call():
            entries = self.client.storage.from_(self.bucket).list(
                prefix,
                {
                    "limit": limit,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
            )
        return list(entries or [])


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Writes discovered paths to the photos table."""

    client: Client

    def upsert_paths(self, paths: list[str]) -> None:
        """Upsert catalog rows keyed by storage_path."""
        rows = [
            {"storage_path": path, "is_anchor": False, "anchor_order": None}
            for path in paths
        ]
        with remote_call():
            self.client.table(PHOTOS_TABLE).upsert(
                rows, on_conflict="storage_path", ignore_duplicates=True
            ).execute()
