"""
Tests for lifecycle bucket classification.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from cherry.application.use_cases.classify import buckets_for, classify
from cherry.application.utils.schedule import effective_end
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.listing import Listing

UTC = ZoneInfo("UTC")
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _request(status: str, request_id: str = "req-1", listing_id: str = "lst-1", age_days: int = 1) -> BookingRequest:
    return BookingRequest(
        id=request_id,
        listing_id=listing_id,
        guest_id="guest-1",
        status=status,
        created_at=NOW - timedelta(days=age_days),
    )


def _listing(available_date: date | None, end_time: str | None = "10:00", listing_id: str = "lst-1") -> Listing:
    return Listing(
        id=listing_id,
        user_id="host-1",
        title="Walk by the river",
        available_date=available_date,
        start_time="09:00",
        end_time=end_time,
    )


PAST = _listing(date(2024, 1, 1))
FUTURE = _listing(date(2024, 12, 1))
UNSCHEDULED = _listing(None, None)


def test_accepted_after_end_is_past():
    assert buckets_for(_request("accepted"), PAST, NOW, UTC) == {Bucket.ALL, Bucket.PAST}


def test_pending_is_pending_regardless_of_date():
    for listing in (PAST, FUTURE, UNSCHEDULED):
        assert buckets_for(_request("pending"), listing, NOW, UTC) == {Bucket.ALL, Bucket.PENDING}


def test_accepted_before_end_is_upcoming():
    assert buckets_for(_request("accepted"), FUTURE, NOW, UTC) == {Bucket.ALL, Bucket.UPCOMING}


def test_accepted_without_schedule_is_upcoming():
    assert buckets_for(_request("accepted"), UNSCHEDULED, NOW, UTC) == {Bucket.ALL, Bucket.UPCOMING}


def test_declined_after_end_is_past():
    assert buckets_for(_request("declined"), PAST, NOW, UTC) == {Bucket.ALL, Bucket.PAST}


def test_declined_not_yet_ended_is_only_in_all():
    assert buckets_for(_request("declined"), FUTURE, NOW, UTC) == {Bucket.ALL}
    assert buckets_for(_request("declined"), UNSCHEDULED, NOW, UTC) == {Bucket.ALL}


def test_status_is_case_insensitive():
    assert Bucket.UPCOMING in buckets_for(_request("Accepted"), FUTURE, NOW, UTC)


def test_end_exactly_now_is_not_past():
    listing = _listing(date(2024, 6, 1), "12:00:00")
    assert buckets_for(_request("accepted"), listing, NOW, UTC) == {Bucket.ALL, Bucket.UPCOMING}


def test_effective_end_uses_configured_zone():
    listing = _listing(date(2024, 6, 1), "10:00")
    la = ZoneInfo("America/Los_Angeles")

    assert effective_end(listing, la) == datetime(2024, 6, 1, 17, 0, tzinfo=timezone.utc)
    assert buckets_for(_request("accepted"), listing, NOW, UTC) == {Bucket.ALL, Bucket.PAST}
    assert buckets_for(_request("accepted"), listing, NOW, la) == {Bucket.ALL, Bucket.UPCOMING}


def test_unparseable_end_time_is_undetermined():
    assert effective_end(_listing(date(2024, 1, 1), "late"), UTC) is None


def test_classify_filters_and_orders_newest_first():
    listings = {"lst-past": _listing(date(2024, 1, 1), listing_id="lst-past"), "lst-future": _listing(date(2024, 12, 1), listing_id="lst-future")}
    requests = [
        _request("pending", "r-old", "lst-future", age_days=5),
        _request("pending", "r-new", "lst-future", age_days=1),
        _request("accepted", "r-upcoming", "lst-future"),
        _request("accepted", "r-past", "lst-past"),
        _request("declined", "r-declined", "lst-future"),
    ]

    pending = classify(requests, listings, Bucket.PENDING, NOW, UTC)
    assert [r.id for r in pending.matched] == ["r-new", "r-old"]

    upcoming = classify(requests, listings, Bucket.UPCOMING, NOW, UTC)
    assert [r.id for r in upcoming.matched] == ["r-upcoming"]

    past = classify(requests, listings, Bucket.PAST, NOW, UTC)
    assert [r.id for r in past.matched] == ["r-past"]

    everything = classify(requests, listings, Bucket.ALL, NOW, UTC)
    assert len(everything.matched) == 5
    assert everything.anomalies == []


def test_unresolved_listing_is_reported_not_silently_dropped():
    requests = [_request("pending", "r-ok"), _request("pending", "r-orphan", listing_id="lst-missing")]

    result = classify(requests, {"lst-1": FUTURE}, Bucket.ALL, NOW, UTC)

    assert [r.id for r in result.matched] == ["r-ok"]
    assert len(result.anomalies) == 1
    assert result.anomalies[0].kind == "listing_unresolved"
    assert result.anomalies[0].request_id == "r-orphan"
    assert result.anomalies[0].reference_id == "lst-missing"
