from __future__ import annotations

import logging

from cherry.application.dto.bookings import BookingDetail, ThreadMessage
from cherry.application.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from cherry.application.ports.booking_store import BookingStorePort
from cherry.application.use_cases.backfill import BackfillLegacyNoteUseCase
from cherry.application.utils.access import require_participant, require_viewer
from cherry.domain.entities.booking_request import BookingRequest, RequestStatus
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.viewer import Viewer


DECISIONS = frozenset({RequestStatus.ACCEPTED.value, RequestStatus.DECLINED.value})


class BookingDetailUseCase:
    def __init__(
        self,
        store: BookingStorePort,
        backfill: BackfillLegacyNoteUseCase,
        name_fallback: str = "Cherry user",
    ) -> None:
        self._store = store
        self._backfill = backfill
        self._name_fallback = name_fallback
        self._logger = logging.getLogger(__name__)

    def get(self, viewer: Viewer, request_id: str) -> BookingDetail:
        user_id = require_viewer(viewer)
        request, listing = self._load(request_id)
        require_participant(user_id, request, listing)

        profiles = {p.id: p for p in self._store.get_profiles({listing.host_id, request.guest_id})}
        thread = self._store.list_messages([request.id])
        thread = self._backfill.execute(request, viewer, thread)

        def name_of(uid: str) -> str:
            profile = profiles.get(uid)
            return profile.display_name(self._name_fallback) if profile else self._name_fallback

        is_host = user_id == listing.host_id
        return BookingDetail(
            request=request,
            listing=listing,
            host_name=name_of(listing.host_id),
            guest_name=name_of(request.guest_id),
            is_host=is_host,
            is_guest=user_id == request.guest_id,
            can_decide=is_host and request.has_status(RequestStatus.PENDING),
            messages=[
                ThreadMessage(message=m, sender_name=name_of(m.sender_id), mine=m.sender_id == user_id)
                for m in thread
            ],
        )

    def send_message(self, viewer: Viewer, request_id: str, body: str) -> Message:
        user_id = require_viewer(viewer)
        if not body or not body.strip():
            raise ValidationError("Message body cannot be empty")

        request, listing = self._load(request_id)
        require_participant(user_id, request, listing)

        message = self._store.insert_message(request_id=request.id, sender_id=user_id, body=body)
        self._logger.info("Message sent", extra={"request_id": request.id, "viewer_id": user_id})
        return message

    def update_status(self, viewer: Viewer, request_id: str, status: str) -> BookingRequest:
        user_id = require_viewer(viewer)
        target = (status or "").strip().lower()
        if target not in DECISIONS:
            raise ValidationError(f"Status must be one of: {', '.join(sorted(DECISIONS))}")

        request, listing = self._load(request_id)
        if user_id != listing.host_id:
            raise PermissionDeniedError("Only the host can accept or decline a request")
        if not request.has_status(RequestStatus.PENDING):
            raise InvalidTransitionError(
                f"Request is already {request.normalized_status}; only pending requests can change"
            )

        updated = self._store.update_request_status(request.id, target)
        self._logger.info(
            "Request status updated",
            extra={"request_id": request.id, "listing_id": listing.id, "status": target},
        )
        return updated

    def _load(self, request_id: str) -> tuple[BookingRequest, Listing]:
        request = self._store.get_request(request_id)
        if request is None:
            raise NotFoundError("Booking not found")

        listings = self._store.get_listings([request.listing_id])
        if not listings:
            self._logger.warning(
                "Request references a listing that did not resolve",
                extra={"request_id": request.id, "listing_id": request.listing_id},
            )
            raise NotFoundError("Listing for this booking not found")
        return request, listings[0]
