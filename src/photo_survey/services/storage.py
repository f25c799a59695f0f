"""Storage URL helpers."""

from collections.abc import Callable
from functools import partial


def public_url(supabase_url: str, bucket: str, path: str) -> str:
    """Build the public object URL without calling Supabase."""
    if not supabase_url:
        return ""
    base = supabase_url.rstrip("/")
    clean_path = path.lstrip("/")
    return f"{base}/storage/v1/object/public/{bucket}/{clean_path}"


def public_url_builder(supabase_url: str, bucket: str) -> Callable[[str], str]:
    """Return a path -> URL function bound to one bucket."""
    return partial(public_url, supabase_url, bucket)
