#!/usr/bin/env python3
"""
Seed the local JSON store with a host, a guest and a few booking requests.

Usage:
  STORE_PROVIDER=json python3 scripts/seed_local.py
  STORE_PROVIDER=json uvicorn cherry.main:app --reload

Then call the API with "Authorization: Bearer host-demo" or "Bearer guest-demo".
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cherry.core.config import settings
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile
from cherry.infrastructure.store.json_store import JsonBookingStore


def main() -> None:
    store = JsonBookingStore(data_file=settings.DATA_FILE)
    now = datetime.now(timezone.utc)

    store.put_profile(Profile(id="host-demo", full_name="Hana Host", role="host", interests=("coffee", "hiking")))
    store.put_profile(Profile(id="guest-demo", full_name="Gus Guest", role="guest"))

    store.put_listing(
        Listing(
            id="lst-coffee",
            user_id="host-demo",
            title="Coffee and a walk",
            location="Dolores Park",
            city="San Francisco",
            state="CA",
            available_date=(now + timedelta(days=7)).date(),
            start_time="10:00",
            end_time="11:30",
        )
    )
    store.put_listing(
        Listing(
            id="lst-brunch",
            user_id="host-demo",
            title="Sunday brunch",
            city="Oakland",
            state="CA",
            available_date=(now - timedelta(days=14)).date(),
            start_time="11:00",
            end_time="13:00",
        )
    )

    store.put_request(
        BookingRequest(
            id="req-coffee",
            listing_id="lst-coffee",
            guest_id="guest-demo",
            status="pending",
            created_at=now - timedelta(hours=6),
            message="Hi, want to meet?",
        )
    )
    store.put_request(
        BookingRequest(
            id="req-brunch",
            listing_id="lst-brunch",
            guest_id="guest-demo",
            status="accepted",
            created_at=now - timedelta(days=20),
        )
    )
    store.put_message(
        Message(
            id="msg-brunch-1",
            request_id="req-brunch",
            sender_id="host-demo",
            body="See you at 11!",
            created_at=now - timedelta(days=15),
        )
    )

    print(f"Seeded {settings.DATA_FILE}")


if __name__ == "__main__":
    main()
