from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from cherry.application.dto.bookings import BookingsOverview, BookingSummary
from cherry.application.ports.booking_store import BookingStorePort
from cherry.application.use_cases.classify import classify
from cherry.application.use_cases.unread import unread_counts, unread_total
from cherry.application.utils.access import require_viewer
from cherry.application.utils.schedule import utc_now
from cherry.domain.entities.anomaly import Anomaly
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile
from cherry.domain.entities.viewer import Viewer


class ListBookingsUseCase:
    """My Bookings: requests visible to the viewer, filtered by lifecycle bucket."""

    def __init__(
        self,
        store: BookingStorePort,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] = utc_now,
        name_fallback: str = "Cherry user",
    ) -> None:
        self._store = store
        self._timezone = timezone
        self._clock = clock
        self._name_fallback = name_fallback
        self._logger = logging.getLogger(__name__)

    def execute(self, viewer: Viewer, bucket: Bucket = Bucket.PENDING) -> BookingsOverview:
        user_id = require_viewer(viewer)
        now = self._clock()

        requests = self._store.list_requests(user_id)
        if not requests:
            return BookingsOverview(bucket=bucket, bookings=[])

        listings_by_id = {l.id: l for l in self._store.get_listings({r.listing_id for r in requests})}
        profile_ids = {l.host_id for l in listings_by_id.values()} | {r.guest_id for r in requests}
        profiles_by_id = {p.id: p for p in self._store.get_profiles(profile_ids)}
        messages = self._store.list_messages([r.id for r in requests])

        classification = classify(requests, listings_by_id, bucket, now, self._timezone)
        counts = unread_counts(requests, listings_by_id, messages, viewer, now, self._timezone)

        anomalies = list(classification.anomalies)
        bookings: list[BookingSummary] = []
        for request in classification.matched:
            listing = listings_by_id[request.listing_id]
            summary, anomaly = self._summarize(user_id, request, listing, profiles_by_id, counts.get(request.id, 0))
            bookings.append(summary)
            if anomaly is not None:
                anomalies.append(anomaly)

        self._logger.info(
            "Bookings derived",
            extra={"viewer_id": user_id, "bucket": bucket.value, "count": len(bookings)},
        )
        return BookingsOverview(bucket=bucket, bookings=bookings, anomalies=anomalies)

    def _summarize(
        self,
        user_id: str,
        request: BookingRequest,
        listing: Listing,
        profiles_by_id: dict[str, Profile],
        unread: int,
    ) -> tuple[BookingSummary, Anomaly | None]:
        is_guest = user_id == request.guest_id
        counterparty_id = listing.host_id if is_guest else request.guest_id

        anomaly = None
        profile = profiles_by_id.get(counterparty_id) if counterparty_id else None
        if counterparty_id and profile is None:
            self._logger.warning(
                "Counterparty profile did not resolve",
                extra={"request_id": request.id, "viewer_id": counterparty_id},
            )
            anomaly = Anomaly(
                kind="profile_unresolved",
                request_id=request.id,
                reference_id=counterparty_id,
                detail="profile not found or not visible",
            )

        summary = BookingSummary(
            request_id=request.id,
            listing_id=listing.id,
            listing_title=listing.title,
            status=request.status,
            role="guest" if is_guest else "host",
            counterparty_id=counterparty_id,
            counterparty_name=profile.display_name(self._name_fallback) if profile else self._name_fallback,
            available_date=listing.available_date,
            start_time=listing.start_time,
            end_time=listing.end_time,
            location=listing.location_label(),
            unread_count=unread,
            created_at=request.created_at,
        )
        return summary, anomaly


class UnreadTotalUseCase:
    """Dashboard badge: unread messages summed across every visible request."""

    def __init__(
        self,
        store: BookingStorePort,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._timezone = timezone
        self._clock = clock

    def execute(self, viewer: Viewer) -> int:
        user_id = require_viewer(viewer)
        requests = self._store.list_requests(user_id)
        if not requests:
            return 0
        listings_by_id = {l.id: l for l in self._store.get_listings({r.listing_id for r in requests})}
        messages: list[Message] = self._store.list_messages([r.id for r in requests])
        return unread_total(requests, listings_by_id, messages, viewer, self._clock(), self._timezone)
