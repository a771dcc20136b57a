from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable

from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile


class BookingStorePort(ABC):
    """Reads and writes against the relational store.

    Row visibility is the store's concern: `list_requests` returns only the
    requests the viewer may see (as guest or as listing host).
    """

    @abstractmethod
    def list_requests(self, viewer_id: str) -> list[BookingRequest]:
        """Requests visible to the viewer, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get_request(self, request_id: str) -> BookingRequest | None:
        raise NotImplementedError

    @abstractmethod
    def get_listings(self, listing_ids: Iterable[str]) -> list[Listing]:
        raise NotImplementedError

    @abstractmethod
    def get_profiles(self, user_ids: Iterable[str]) -> list[Profile]:
        raise NotImplementedError

    @abstractmethod
    def list_messages(self, request_ids: Iterable[str]) -> list[Message]:
        """Messages of the given threads, ordered by created_at ascending."""
        raise NotImplementedError

    @abstractmethod
    def insert_message(self, request_id: str, sender_id: str, body: str) -> Message:
        raise NotImplementedError

    @abstractmethod
    def update_request_status(self, request_id: str, status: str) -> BookingRequest:
        raise NotImplementedError

    @abstractmethod
    def backfill_legacy_note(
        self,
        request_id: str,
        sender_id: str,
        body: str,
        created_at: datetime,
    ) -> Message | None:
        """
        Move a legacy request note into the thread as a message.

        Must be idempotent: when a message with the same sender, body and
        created_at already exists in the thread, no new message is inserted.
        The legacy field is cleared in both cases.

        Returns the inserted or already-present message, or None when a
        concurrent caller cleared the field first and its message is not yet
        visible. Raises StoreError if the insert fails; the legacy field is
        then left set (or put back) so a later view can retry.
        """
        raise NotImplementedError
