from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from cherry.domain.entities.anomaly import Anomaly
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message


@dataclass(frozen=True)
class BookingSummary:
    request_id: str
    listing_id: str
    listing_title: str
    status: str
    role: str  # "guest" | "host"
    counterparty_id: str | None
    counterparty_name: str
    available_date: date | None
    start_time: str | None
    end_time: str | None
    location: str
    unread_count: int
    created_at: datetime


@dataclass(frozen=True)
class BookingsOverview:
    bucket: Bucket
    bookings: list[BookingSummary]
    anomalies: list[Anomaly] = field(default_factory=list)


@dataclass(frozen=True)
class ThreadMessage:
    message: Message
    sender_name: str
    mine: bool


@dataclass(frozen=True)
class BookingDetail:
    request: BookingRequest
    listing: Listing
    host_name: str
    guest_name: str
    is_host: bool
    is_guest: bool
    can_decide: bool
    messages: list[ThreadMessage]
