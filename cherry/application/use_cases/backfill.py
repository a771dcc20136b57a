from __future__ import annotations

import logging

from cherry.application.exceptions import StoreError
from cherry.application.ports.booking_store import BookingStorePort
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.message import Message
from cherry.domain.entities.viewer import Viewer


class BackfillLegacyNoteUseCase:
    """Moves the legacy note on a request into its thread, once, from the guest's view."""

    def __init__(self, store: BookingStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def should_backfill(request: BookingRequest, viewer: Viewer, thread: list[Message]) -> bool:
        return (
            bool(request.message)
            and viewer.is_authenticated
            and viewer.user_id == request.guest_id
            and (len(thread) == 0 or BackfillLegacyNoteUseCase._is_uncleared_backfill(request, thread))
        )

    @staticmethod
    def _is_uncleared_backfill(request: BookingRequest, thread: list[Message]) -> bool:
        """A thread holding only the note itself means an earlier backfill never cleared it."""
        if len(thread) != 1:
            return False
        only = thread[0]
        return (
            only.sender_id == request.guest_id
            and only.body == request.message
            and only.created_at == request.created_at
        )

    def execute(self, request: BookingRequest, viewer: Viewer, thread: list[Message]) -> list[Message]:
        """Return the thread, with the backfilled note appended when the backfill ran."""
        if not self.should_backfill(request, viewer, thread):
            return thread

        try:
            message = self._store.backfill_legacy_note(
                request_id=request.id,
                sender_id=request.guest_id,
                body=request.message or "",
                created_at=request.created_at,
            )
        except StoreError as e:
            # Legacy field stays in place; the next guest view retries.
            self._logger.warning(
                "Legacy note backfill failed",
                extra={"request_id": request.id, "reason": str(e)},
            )
            return thread

        if message is None or any(m.id == message.id for m in thread):
            return thread

        self._logger.info("Legacy note backfilled", extra={"request_id": request.id})
        return sorted([*thread, message], key=lambda m: m.created_at)
