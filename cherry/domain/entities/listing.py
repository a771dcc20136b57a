from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Listing:
    id: str
    user_id: str  # host
    title: str
    description: str | None = None
    location: str | None = None
    city: str | None = None
    state: str | None = None
    available_date: date | None = None
    start_time: str | None = None  # HH:MM[:SS]
    end_time: str | None = None  # HH:MM[:SS]
    is_booked: bool = False

    @property
    def host_id(self) -> str:
        return self.user_id

    def location_label(self) -> str:
        parts = [p for p in (self.location, self.city, self.state) if p]
        return " • ".join(parts)
