from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from cherry.application.utils.schedule import is_expired
from cherry.domain.entities.booking_request import BookingRequest, RequestStatus
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.viewer import Viewer


def last_sent_at(messages: Iterable[Message], user_id: str) -> datetime | None:
    """Latest created_at among the user's own messages, None if they sent none."""
    latest: datetime | None = None
    for m in messages:
        if m.sender_id == user_id and (latest is None or m.created_at > latest):
            latest = m.created_at
    return latest


def thread_is_muted(request: BookingRequest, listing: Listing | None, now: datetime, tz: ZoneInfo) -> bool:
    """Declined requests and expired listings never carry unread activity."""
    if request.has_status(RequestStatus.DECLINED):
        return True
    return is_expired(listing, now, tz)


def unread_count(
    request: BookingRequest,
    listing: Listing | None,
    messages: Iterable[Message],
    viewer: Viewer,
    now: datetime,
    tz: ZoneInfo,
) -> int:
    if not viewer.is_authenticated or not viewer.user_id:
        return 0
    if thread_is_muted(request, listing, now, tz):
        return 0

    thread = [m for m in messages if m.request_id == request.id]
    mine = last_sent_at(thread, viewer.user_id)
    return sum(
        1
        for m in thread
        if m.sender_id != viewer.user_id and (mine is None or m.created_at > mine)
    )


def unread_counts(
    requests: Iterable[BookingRequest],
    listings_by_id: Mapping[str, Listing],
    messages: Iterable[Message],
    viewer: Viewer,
    now: datetime,
    tz: ZoneInfo,
) -> dict[str, int]:
    """Unread count per request id; requests with nothing unread are omitted."""
    if not viewer.is_authenticated or not viewer.user_id:
        return {}

    by_request: dict[str, list[Message]] = defaultdict(list)
    for m in messages:
        by_request[m.request_id].append(m)

    counts: dict[str, int] = {}
    for request in requests:
        thread = by_request.get(request.id)
        if not thread:
            continue
        count = unread_count(request, listings_by_id.get(request.listing_id), thread, viewer, now, tz)
        if count:
            counts[request.id] = count
    return counts


def unread_total(
    requests: Iterable[BookingRequest],
    listings_by_id: Mapping[str, Listing],
    messages: Iterable[Message],
    viewer: Viewer,
    now: datetime,
    tz: ZoneInfo,
) -> int:
    return sum(unread_counts(requests, listings_by_id, messages, viewer, now, tz).values())
