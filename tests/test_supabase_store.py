"""
Tests for the PostgREST adapter, driven through httpx.MockTransport.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

import httpx
import pytest

from cherry.application.exceptions import StoreError
from cherry.infrastructure.store.supabase_store import SupabaseBookingStore

CREATED = "2024-05-01T09:30:00+00:00"


def _store(handler) -> SupabaseBookingStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseBookingStore(
        access_token="user-jwt",
        base_url="https://cherry.supabase.co",
        api_key="anon-key",
        client=client,
    )


def test_reads_send_user_token_and_parse_rows():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer user-jwt"
        return httpx.Response(
            200,
            json=[
                {
                    "id": "req-1",
                    "listing_id": "lst-1",
                    "guest_id": "guest-1",
                    "message": None,
                    "requested_date": None,
                    "status": "pending",
                    "created_at": "2024-05-01T09:30:00.123456+00:00",
                }
            ],
        )

    requests = _store(handler).list_requests("guest-1")

    assert len(requests) == 1
    assert requests[0].created_at.tzinfo is not None
    assert seen[0].url.path == "/rest/v1/requests"
    assert seen[0].url.params["order"] == "created_at.desc"


def test_empty_id_lists_skip_the_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    store = _store(handler)
    assert store.get_listings([]) == []
    assert store.get_profiles([]) == []
    assert store.list_messages([]) == []


def test_listing_ids_are_sent_as_in_filter():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["id"] == 'in.("lst-1","lst-2")'
        return httpx.Response(
            200,
            json=[
                {"id": "lst-1", "user_id": "host-1", "title": "Tea", "available_date": "2024-07-01", "start_time": "10:00:00", "end_time": "11:00:00"},
            ],
        )

    listings = _store(handler).get_listings(["lst-1", "lst-2", "lst-1"])
    assert [l.id for l in listings] == ["lst-1"]
    assert listings[0].end_time == "11:00:00"


def test_http_errors_become_store_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    with pytest.raises(StoreError):
        _store(handler).get_request("req-1")


class _FakeBackend:
    """Serves the messages table and the legacy note on req-1 the way PostgREST filters them."""

    def __init__(self, note: str | None = "Hi, want to meet?", fail_insert: bool = False) -> None:
        self.note = note
        self.messages: list[dict] = []
        self.calls: list[str] = []
        self.fail_insert = fail_insert
        self.lock = threading.Lock()
        self.before_read = lambda: None

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self.lock:
            self.calls.append(f"{request.method} {request.url.path}")
        if request.method == "GET":
            self.before_read()
            with self.lock:
                return httpx.Response(200, json=list(self.messages))
        with self.lock:
            if request.method == "POST":
                if self.fail_insert:
                    return httpx.Response(409, json={"message": "created_at must be now"})
                row = json.loads(request.content)[0]
                inserted = {"id": f"m{len(self.messages) + 1}", **row}
                self.messages.append(inserted)
                return httpx.Response(201, json=[inserted])
            if request.method == "PATCH":
                body = json.loads(request.content)
                if request.url.params["message"] == "not.is.null":
                    if self.note is None:
                        return httpx.Response(200, json=[])
                    self.note = body["message"]
                    return httpx.Response(200, json=[{"id": "req-1"}])
                if request.url.params["message"] == "is.null" and self.note is None:
                    self.note = body["message"]
                return httpx.Response(204)
        raise AssertionError(request.method)


CREATED_AT = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_backfill_claims_note_then_inserts_with_original_timestamp():
    backend = _FakeBackend()

    message = _store(backend.handler).backfill_legacy_note("req-1", "guest-1", "Hi, want to meet?", CREATED_AT)

    assert message.created_at == CREATED_AT
    assert backend.messages[0]["created_at"] == CREATED
    assert backend.note is None
    assert backend.calls == ["GET /rest/v1/messages", "PATCH /rest/v1/requests", "POST /rest/v1/messages"]


def test_backfill_after_note_claimed_elsewhere_does_not_insert():
    backend = _FakeBackend(note=None)

    message = _store(backend.handler).backfill_legacy_note("req-1", "guest-1", "Hi, want to meet?", CREATED_AT)

    assert message is None
    assert backend.messages == []
    assert "POST /rest/v1/messages" not in backend.calls


def test_backfill_with_leftover_message_only_clears_note():
    backend = _FakeBackend()
    backend.messages.append(
        {"id": "m1", "request_id": "req-1", "sender_id": "guest-1", "body": "Hi, want to meet?", "created_at": CREATED}
    )

    message = _store(backend.handler).backfill_legacy_note("req-1", "guest-1", "Hi, want to meet?", CREATED_AT)

    assert message.id == "m1"
    assert len(backend.messages) == 1
    assert backend.note is None
    assert "POST /rest/v1/messages" not in backend.calls


def test_backfill_insert_failure_restores_note():
    backend = _FakeBackend(fail_insert=True)

    with pytest.raises(StoreError):
        _store(backend.handler).backfill_legacy_note("req-1", "guest-1", "Hi, want to meet?", CREATED_AT)

    assert backend.messages == []
    assert backend.note == "Hi, want to meet?"
    assert backend.calls[-1] == "PATCH /rest/v1/requests"


def test_concurrent_backfills_insert_one_message():
    backend = _FakeBackend()
    # Both tabs finish their first read before either writes.
    barrier = threading.Barrier(2)
    reads: list[int] = []

    def before_read() -> None:
        with backend.lock:
            reads.append(1)
            first_round = len(reads) <= 2
        if first_round:
            barrier.wait(timeout=5)

    backend.before_read = before_read
    results: list = []
    errors: list[BaseException] = []

    def view() -> None:
        try:
            results.append(
                _store(backend.handler).backfill_legacy_note("req-1", "guest-1", "Hi, want to meet?", CREATED_AT)
            )
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=view) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert len(backend.messages) == 1
    assert backend.calls.count("POST /rest/v1/messages") == 1
    assert backend.note is None
