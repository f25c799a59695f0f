"""Bucket-to-catalog directory sync."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})
PAGE_SIZE = 1000
CHUNK_SIZE = 500

_logger = logging.getLogger(__name__)


class StorageLister(Protocol):
    """Paginated listing of a storage bucket."""

    def list_page(
        self, prefix: str, limit: int, offset: int
    ) -> list[dict[str, object]]:
        """Return one page of entries under prefix, sorted by name."""


class CatalogRepository(Protocol):
    """Persistence interface for the photo catalog."""

    def upsert_paths(self, paths: list[str]) -> None:
        """Insert catalog rows, ignoring paths that already exist."""


@dataclass(frozen=True)
class SyncReport:
    """Outcome of a sync run."""

    found: int
    upserted: int


def is_image_name(name: str) -> bool:
    """Return True when name ends with a known image extension."""
    lower = name.lower()
    return any(lower.endswith(ext) for ext in IMAGE_EXTENSIONS)


def chunked(items: list[str], size: int) -> Iterable[list[str]]:
    """Yield consecutive slices of at most size items."""
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


@dataclass
class DirectorySyncService:
    """Walks the bucket and upserts image paths into the catalog."""

    lister: StorageLister
    catalog: CatalogRepository
    page_size: int = PAGE_SIZE
    chunk_size: int = CHUNK_SIZE

    def list_image_paths(self, prefix: str = "") -> list[str]:
        """Recursively collect image paths under prefix."""
        prefix = prefix.strip("/")
        paths: list[str] = []
        offset = 0
        while True:
            page = self.lister.list_page(prefix, self.page_size, offset)
            if not page:
                break
            for entry in page:
                name = entry.get("name")
                if not name:
                    continue
                path = f"{prefix}/{name}" if prefix else str(name)
                # Storage returns folders as entries without metadata.
                if entry.get("metadata") is None:
                    paths.extend(self.list_image_paths(path))
                elif is_image_name(str(name)):
                    paths.append(path)
            if len(page) < self.page_size:
                break
            offset += self.page_size
        return paths

    def upsert_paths(self, paths: list[str]) -> int:
        """Write paths to the catalog chunk by chunk; returns rows sent."""
        total = len(paths)
        done = 0
        for chunk in chunked(paths, self.chunk_size):
            self.catalog.upsert_paths(chunk)
            done += len(chunk)
            _logger.info("Upserted %s / %s", done, total)
        return done

    def run(self, prefix: str = "", dry_run: bool = False) -> SyncReport:
        """List the bucket and upsert what was found."""
        paths = self.list_image_paths(prefix)
        _logger.info("Found %s images under %r", len(paths), prefix or "/")
        if dry_run:
            return SyncReport(found=len(paths), upserted=0)
        upserted = self.upsert_paths(paths)
        return SyncReport(found=len(paths), upserted=upserted)
