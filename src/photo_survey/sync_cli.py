"""Command line entry point for the bucket-to-catalog sync."""

import argparse
import logging

from pydantic import ValidationError
from supabase import ClientOptions, create_client

from photo_survey.adapters.supabase_catalog import (
    SupabaseCatalogRepository,
    SupabaseStorageLister,
)
from photo_survey.app_logging import configure_logging
from photo_survey.config import SyncSettings
from photo_survey.domain.errors import RemoteCallError
from photo_survey.services.sync import CHUNK_SIZE, DirectorySyncService

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the sync command."""
    parser = argparse.ArgumentParser(
        prog="photo-survey-sync",
        description="Upsert image paths from a storage bucket into the photos table.",
    )
    parser.add_argument(
        "--folder",
        default=None,
        help="Root folder inside the bucket (defaults to SUPABASE_FOLDER).",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=CHUNK_SIZE,
        help="Rows per upsert request.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List images without writing to the database.",
    )
    return parser


def build_service(settings: SyncSettings, chunk_size: int) -> DirectorySyncService:
    """Wire the sync service against Supabase with the service role key."""
    client = create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    return DirectorySyncService(
        lister=SupabaseStorageLister(client, settings.supabase_bucket),
        catalog=SupabaseCatalogRepository(client),
        chunk_size=chunk_size,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the sync and return a process exit code."""
    configure_logging()
    args = build_parser().parse_args(argv)
    if args.chunk_size <= 0:
        _logger.error("--chunk-size must be positive")
        return 2
    try:
        settings = SyncSettings()
    except ValidationError as exc:
        missing = ", ".join(str(error["loc"][0]).upper() for error in exc.errors())
        _logger.error("Missing sync configuration: %s", missing)
        return 1

    folder = settings.supabase_folder if args.folder is None else args.folder
    service = build_service(settings, args.chunk_size)
    try:
        report = service.run(folder, dry_run=args.dry_run)
    except RemoteCallError as exc:
        _logger.error("Sync failed: %s", exc)
        return 1
    _logger.info(
        "Done. bucket=%s found=%s upserted=%s",
        settings.supabase_bucket,
        report.found,
        report.upserted,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
