from __future__ import annotations

import threading
from contextlib import contextmanager
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Iterator

from cherry.application.exceptions import StoreError
from cherry.application.ports.booking_store import BookingStorePort
from cherry.application.utils.schedule import utc_now
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile


class MemoryBookingStore(BookingStorePort):
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._requests: dict[str, BookingRequest] = {}
        self._listings: dict[str, Listing] = {}
        self._profiles: dict[str, Profile] = {}
        self._messages: list[Message] = []
        self._clock = clock
        self._lock = threading.Lock()

    # Seeding, used by tests and local development.

    def put_profile(self, profile: Profile) -> Profile:
        with self._writing():
            self._profiles[profile.id] = profile
        return profile

    def put_listing(self, listing: Listing) -> Listing:
        with self._writing():
            self._listings[listing.id] = listing
        return listing

    def put_request(self, request: BookingRequest) -> BookingRequest:
        with self._writing():
            self._requests[request.id] = request
        return request

    def put_message(self, message: Message) -> Message:
        with self._writing():
            self._messages.append(message)
        return message

    # BookingStorePort

    def list_requests(self, viewer_id: str) -> list[BookingRequest]:
        visible = [r for r in self._requests.values() if self._is_visible(r, viewer_id)]
        return sorted(visible, key=lambda r: r.created_at, reverse=True)

    def get_request(self, request_id: str) -> BookingRequest | None:
        return self._requests.get(request_id)

    def get_listings(self, listing_ids: Iterable[str]) -> list[Listing]:
        return [self._listings[i] for i in dict.fromkeys(listing_ids) if i in self._listings]

    def get_profiles(self, user_ids: Iterable[str]) -> list[Profile]:
        return [self._profiles[i] for i in dict.fromkeys(user_ids) if i in self._profiles]

    def list_messages(self, request_ids: Iterable[str]) -> list[Message]:
        wanted = set(request_ids)
        return sorted((m for m in self._messages if m.request_id in wanted), key=lambda m: m.created_at)

    def insert_message(self, request_id: str, sender_id: str, body: str) -> Message:
        with self._writing():
            if request_id not in self._requests:
                raise StoreError(f"Request {request_id} does not exist")
            message = Message(
                id=uuid.uuid4().hex,
                request_id=request_id,
                sender_id=sender_id,
                body=body,
                created_at=self._clock(),
            )
            self._messages.append(message)
        return message

    def update_request_status(self, request_id: str, status: str) -> BookingRequest:
        with self._writing():
            request = self._requests.get(request_id)
            if request is None:
                raise StoreError(f"Request {request_id} does not exist")
            updated = replace(request, status=status)
            self._requests[request_id] = updated
        return updated

    def backfill_legacy_note(
        self,
        request_id: str,
        sender_id: str,
        body: str,
        created_at: datetime,
    ) -> Message | None:
        with self._writing():
            request = self._requests.get(request_id)
            if request is None:
                raise StoreError(f"Request {request_id} does not exist")

            message = next(
                (
                    m
                    for m in self._messages
                    if m.request_id == request_id
                    and m.sender_id == sender_id
                    and m.body == body
                    and m.created_at == created_at
                ),
                None,
            )
            if message is None:
                message = Message(
                    id=uuid.uuid4().hex,
                    request_id=request_id,
                    sender_id=sender_id,
                    body=body,
                    created_at=created_at,
                )
                self._messages.append(message)

            self._requests[request_id] = replace(request, message=None)
        return message

    def _is_visible(self, request: BookingRequest, viewer_id: str) -> bool:
        if request.guest_id == viewer_id:
            return True
        listing = self._listings.get(request.listing_id)
        return listing is not None and listing.host_id == viewer_id

    @contextmanager
    def _writing(self) -> Iterator[None]:
        """Run a write under the lock and commit it; a failed commit restores the previous tables."""
        with self._lock:
            snapshot = (dict(self._requests), dict(self._listings), dict(self._profiles), list(self._messages))
            try:
                yield
                self._commit()
            except StoreError:
                self._requests, self._listings, self._profiles, self._messages = snapshot
                raise

    def _commit(self) -> None:
        """Hook called under the lock after every write."""
        pass
