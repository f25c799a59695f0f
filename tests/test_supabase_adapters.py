"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest
from supabase import AuthError, PostgrestAPIError, StorageException

from photo_survey.adapters.supabase_auth_gateway import SupabaseAuthGateway
from photo_survey.adapters.supabase_catalog import (
    SupabaseCatalogRepository,
    SupabaseStorageLister,
)
from photo_survey.adapters.supabase_photo_repository import (
    SupabasePhotoRepository,
    SupabaseRatingRepository,
)
from photo_survey.domain.errors import RemoteCallError
from photo_survey.domain.models import RatingRecord


@dataclass
class FakeResponse:
    data: object


@dataclass
class FakeTable:
    name: str
    response_queue: list[object] = field(default_factory=list)
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    error: Exception | None = None

    def queue(self, data: object) -> None:
        self.response_queue.append(data)

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        self.last_options = options
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        data = self.response_queue.pop(0) if self.response_queue else []
        return FakeResponse(data=data)


@dataclass
class FakeRpc:
    data: object
    error: Exception | None = None

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        return FakeResponse(data=self.data)


@dataclass
class FakeBucket:
    pages: list[list[dict[str, object]]]
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    error: Exception | None = None

    def list(self, path, options):  # type: ignore[no-untyped-def]
        self.calls.append((path, options))
        if self.error is not None:
            raise self.error
        return self.pages.pop(0) if self.pages else []


@dataclass
class FakeStorage:
    buckets: dict[str, FakeBucket] = field(default_factory=dict)

    def from_(self, bucket: str) -> FakeBucket:
        return self.buckets.setdefault(bucket, FakeBucket(pages=[]))


def _session(user_id: str = "user-1", email: str = "rater@example.org"):  # type: ignore[no-untyped-def]
    return SimpleNamespace(
        access_token="access",
        refresh_token="refresh",
        user=SimpleNamespace(id=user_id, email=email),
    )


@dataclass
class FakeAuth:
    session: object | None = None
    error: Exception | None = None
    calls: list[tuple[str, object]] = field(default_factory=list)

    def _record(self, name: str, payload: object) -> None:
        self.calls.append((name, payload))
        if self.error is not None:
            raise self.error

    def sign_up(self, credentials):  # type: ignore[no-untyped-def]
        self._record("sign_up", credentials)
        return SimpleNamespace(session=self.session, user=None)

    def sign_in_with_password(self, credentials):  # type: ignore[no-untyped-def]
        self._record("sign_in_with_password", credentials)
        return SimpleNamespace(session=self.session)

    def sign_out(self) -> None:
        self._record("sign_out", None)

    def get_session(self):  # type: ignore[no-untyped-def]
        self._record("get_session", None)
        return self.session

    def set_session(self, access_token, refresh_token):  # type: ignore[no-untyped-def]
        self._record("set_session", (access_token, refresh_token))
        return SimpleNamespace(session=self.session)

    def verify_otp(self, params):  # type: ignore[no-untyped-def]
        self._record("verify_otp", params)
        return SimpleNamespace(session=self.session)

    def reset_password_for_email(self, email, options):  # type: ignore[no-untyped-def]
        self._record("reset_password_for_email", (email, options))

    def update_user(self, attributes):  # type: ignore[no-untyped-def]
        self._record("update_user", attributes)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    rpc_data: object = None
    rpc_error: Exception | None = None
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    storage: FakeStorage = field(default_factory=FakeStorage)
    auth: FakeAuth = field(default_factory=FakeAuth)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]

    def rpc(self, fn: str, params: dict[str, object]) -> FakeRpc:
        self.rpc_calls.append((fn, params))
        return FakeRpc(data=self.rpc_data, error=self.rpc_error)


def _record() -> RatingRecord:
    return RatingRecord(
        user_id="user-1",
        photo_id="photo-1",
        wealth_score=5,
        wealth_rationale=None,
        relevance_score=7,
        relevance_rationale="crowded tenement windows",
    )


def test_photo_repository_returns_single_row() -> None:
    client = FakeSupabaseClient(rpc_data=[{"id": "photo-1", "storage_path": "a/1.jpg"}])

    photo = SupabasePhotoRepository(client).next_eligible_photo("user-1", 20)

    assert photo is not None
    assert photo.storage_path == "a/1.jpg"
    assert client.rpc_calls == [
        ("next_photo_for_user", {"p_user_id": "user-1", "p_max_ratings": 20})
    ]


@pytest.mark.parametrize("data", [[], None, {"id": None, "storage_path": None}])
def test_photo_repository_empty_result(data: object) -> None:
    client = FakeSupabaseClient(rpc_data=data)

    assert SupabasePhotoRepository(client).next_eligible_photo("user-1", 20) is None


def test_photo_repository_accepts_object_result() -> None:
    client = FakeSupabaseClient(rpc_data={"id": 42, "storage_path": "b.png"})

    photo = SupabasePhotoRepository(client).next_eligible_photo("user-1", 20)

    assert photo is not None
    assert photo.id == "42"


def test_photo_repository_wraps_postgrest_errors() -> None:
    client = FakeSupabaseClient(
        rpc_error=PostgrestAPIError(
            {"message": "function next_photo_for_user does not exist", "code": "42883"}
        )
    )

    with pytest.raises(RemoteCallError, match="does not exist"):
        SupabasePhotoRepository(client).next_eligible_photo("user-1", 20)


def test_rating_repository_upserts_on_pair_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("user_photo_scores")
    table.queue([_record().as_row()])

    SupabaseRatingRepository(client).upsert_rating(_record())

    assert table.last_payload == _record().as_row()
    assert table.last_options == {"on_conflict": "user_id,photo_id"}


def test_rating_repository_rejects_empty_response() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(RemoteCallError):
        SupabaseRatingRepository(client).upsert_rating(_record())


def test_catalog_repository_upserts_paths() -> None:
    client = FakeSupabaseClient()

    SupabaseCatalogRepository(client).upsert_paths(["a.jpg", "b/c.png"])

    table = client.tables["photos"]
    assert table.last_payload == [
        {"storage_path": "a.jpg", "is_anchor": False, "anchor_order": None},
        {"storage_path": "b/c.png", "is_anchor": False, "anchor_order": None},
    ]
    assert table.last_options == {
        "on_conflict": "storage_path",
        "ignore_duplicates": True,
    }


def test_storage_lister_passes_paging_options() -> None:
    client = FakeSupabaseClient()
    bucket = client.storage.from_("art_photos")
    bucket.pages.append([{"name": "a.jpg", "metadata": {}}])

    entries = SupabaseStorageLister(client, "art_photos").list_page("nyc", 1000, 2000)

    assert entries == [{"name": "a.jpg", "metadata": {}}]
    assert bucket.calls == [
        (
            "nyc",
            {
                "limit": 1000,
                "offset": 2000,
                "sortBy": {"column": "name", "order": "asc"},
            },
        )
    ]


def test_storage_lister_wraps_storage_errors() -> None:
    client = FakeSupabaseClient()
    client.storage.from_("art_photos").error = StorageException(
        {"statusCode": 404, "error": "Not found", "message": "Bucket not found"}
    )

    with pytest.raises(RemoteCallError, match="Bucket not found"):
        SupabaseStorageLister(client, "art_photos").list_page("", 1000, 0)


def test_auth_gateway_sign_in_maps_session() -> None:
    client = FakeSupabaseClient(auth=FakeAuth(session=_session()))

    session = SupabaseAuthGateway(client).sign_in("rater@example.org", "secret1")

    assert session.user_id == "user-1"
    assert session.email == "rater@example.org"
    assert session.access_token == "access"
    assert client.auth.calls == [
        (
            "sign_in_with_password",
            {"email": "rater@example.org", "password": "secret1"},
        )
    ]


def test_auth_gateway_sign_up_without_session() -> None:
    client = FakeSupabaseClient()

    assert SupabaseAuthGateway(client).sign_up("new@example.org", "secret1") is None


def test_auth_gateway_wraps_auth_errors() -> None:
    client = FakeSupabaseClient(
        auth=FakeAuth(error=AuthError("Invalid login credentials", None))
    )

    with pytest.raises(RemoteCallError, match="Invalid login credentials"):
        SupabaseAuthGateway(client).sign_in("rater@example.org", "nope")


def test_auth_gateway_missing_session_is_an_error() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(RemoteCallError):
        SupabaseAuthGateway(client).set_session("access", "refresh")


def test_auth_gateway_recovery_calls() -> None:
    client = FakeSupabaseClient(auth=FakeAuth(session=_session()))
    gateway = SupabaseAuthGateway(client)

    gateway.verify_recovery("hash")
    gateway.send_password_reset("rater@example.org", "https://survey.example.org/reset")
    gateway.update_password("newpass1")
    gateway.sign_out()

    assert client.auth.calls == [
        ("verify_otp", {"token_hash": "hash", "type": "recovery"}),
        (
            "reset_password_for_email",
            ("rater@example.org", {"redirect_to": "https://survey.example.org/reset"}),
        ),
        ("update_user", {"password": "newpass1"}),
        ("sign_out", None),
    ]
    assert gateway.get_session() is not None
