"""
Tests for the JSON-file booking store.
"""

from __future__ import annotations

import json
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from cherry.application.exceptions import StoreError
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.profile import Profile
from cherry.infrastructure.store.json_store import JsonBookingStore

CREATED = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_json_store_persistence():
    """State written by one store instance is visible to the next."""
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = str(Path(tmpdir) / "cherry.json")
        store = JsonBookingStore(data_file=data_file)
        store.put_profile(Profile(id="guest-1", full_name="Gus", interests=("chess", "tea")))
        store.put_listing(Listing(id="lst-1", user_id="host-1", title="Tea", available_date=date(2024, 7, 1), end_time="11:00"))
        store.put_request(
            BookingRequest(id="req-1", listing_id="lst-1", guest_id="guest-1", status="pending", created_at=CREATED, message="hello")
        )
        store.backfill_legacy_note("req-1", "guest-1", "hello", CREATED)
        store.update_request_status("req-1", "accepted")

        reopened = JsonBookingStore(data_file=data_file)

        request = reopened.get_request("req-1")
        assert request.status == "accepted"
        assert request.message is None
        assert request.created_at == CREATED
        assert reopened.get_listings(["lst-1"])[0].available_date == date(2024, 7, 1)
        assert reopened.get_profiles(["guest-1"])[0].interests == ("chess", "tea")
        messages = reopened.list_messages(["req-1"])
        assert [(m.body, m.created_at) for m in messages] == [("hello", CREATED)]
        assert [r.id for r in reopened.list_requests("host-1")] == ["req-1"]


def test_json_store_corrupted_file_starts_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "cherry.json"
        data_file.write_text("{not json", encoding="utf-8")

        store = JsonBookingStore(data_file=str(data_file))

        assert store.list_requests("anyone") == []


def test_json_store_writes_atomically():
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "cherry.json"
        store = JsonBookingStore(data_file=str(data_file))
        store.put_profile(Profile(id="p-1"))

        data = json.loads(data_file.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert [p["id"] for p in data["profiles"]] == ["p-1"]
        assert not (Path(tmpdir) / "cherry.json.tmp").exists()


def test_json_store_failed_write_leaves_memory_unchanged():
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "cherry.json"
        store = JsonBookingStore(data_file=str(data_file))
        store.put_listing(Listing(id="lst-1", user_id="host-1", title="Tea"))
        store.put_request(
            BookingRequest(id="req-1", listing_id="lst-1", guest_id="guest-1", status="pending", created_at=CREATED, message="hello")
        )
        # A directory in place of the data file makes the replace step fail.
        data_file.unlink()
        data_file.mkdir()

        with pytest.raises(StoreError):
            store.backfill_legacy_note("req-1", "guest-1", "hello", CREATED)

        assert store.list_messages(["req-1"]) == []
        assert store.get_request("req-1").message == "hello"
        assert not (Path(tmpdir) / "cherry.json.tmp").exists()
