"""Translation of Supabase client errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from supabase import AuthError, PostgrestAPIError, StorageException

from photo_survey.domain.errors import RemoteCallError


@contextmanager
def remote_call() -> Iterator[None]:
    """Re-raise Supabase errors as RemoteCallError, keeping the message."""
    try:
        yield
    except AuthError as exc:
        raise RemoteCallError(exc.message) from exc
    except PostgrestAPIError as exc:
        raise RemoteCallError(exc.message or str(exc)) from exc
    except StorageException as exc:
        raise RemoteCallError(_storage_message(exc)) from exc


def _storage_message(exc: StorageException) -> str:
    payload = exc.args[0] if exc.args else None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return str(exc)
