from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass(frozen=True)
class BookingRequest:
    id: str
    listing_id: str
    guest_id: str
    status: str
    created_at: datetime
    message: str | None = None  # legacy inline note, migrated into the thread
    requested_date: date | None = None

    @property
    def normalized_status(self) -> str:
        return (self.status or "").strip().lower()

    def has_status(self, status: RequestStatus) -> bool:
        return self.normalized_status == status.value
