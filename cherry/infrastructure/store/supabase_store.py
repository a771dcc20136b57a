from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

import httpx

from cherry.application.exceptions import StoreError
from cherry.application.ports.booking_store import BookingStorePort
from cherry.application.utils.schedule import parse_timestamp
from cherry.core.config import settings
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile
from cherry.infrastructure.store.rows import (
    listing_from_row,
    message_from_row,
    profile_from_row,
    request_from_row,
)


LISTING_COLUMNS = "id,user_id,title,description,location,city,state,available_date,start_time,end_time,is_booked"
MESSAGE_COLUMNS = "id,request_id,sender_id,body,created_at"


def _in_filter(values: Iterable[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


class SupabaseBookingStore(BookingStorePort):
    """
    PostgREST adapter for the Supabase tables.

    Requests are made with the viewer's access token so that row-level
    security decides which rows are visible and writable.
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.SUPABASE_URL or "").rstrip("/")
        self._api_key = api_key or settings.SUPABASE_ANON_KEY
        if not self._base_url or not self._api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required for the Supabase store")
        self._access_token = access_token or self._api_key
        self._client = client or httpx.Client(timeout=settings.SUPABASE_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _call(
        self,
        method: str,
        table: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        url = f"{self._base_url}/rest/v1/{table}"
        try:
            resp = self._client.request(method, url, params=params, json=json, headers=self._headers(prefer))
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error(
                "Supabase request failed",
                extra={"status": e.response.status_code, "reason": e.response.text[:200], "table": table},
            )
            raise StoreError(f"{method} {table} failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            self._logger.error("Supabase unreachable", extra={"reason": str(e), "table": table})
            raise StoreError(f"{method} {table} failed: {e}") from e

        if not resp.content:
            return []
        data = resp.json()
        return data if isinstance(data, list) else [data]

    def _rows(self, rows: list[dict[str, Any]], parse, table: str) -> list:
        try:
            return [parse(row) for row in rows]
        except (KeyError, ValueError) as e:
            raise StoreError(f"Malformed {table} row: {e}") from e

    def list_requests(self, viewer_id: str) -> list[BookingRequest]:
        rows = self._call("GET", "requests", params={"select": "*", "order": "created_at.desc"})
        return self._rows(rows, request_from_row, "requests")

    def get_request(self, request_id: str) -> BookingRequest | None:
        rows = self._call("GET", "requests", params={"select": "*", "id": f"eq.{request_id}", "limit": 1})
        parsed = self._rows(rows, request_from_row, "requests")
        return parsed[0] if parsed else None

    def get_listings(self, listing_ids: Iterable[str]) -> list[Listing]:
        ids = list(dict.fromkeys(listing_ids))
        if not ids:
            return []
        rows = self._call("GET", "listings", params={"select": LISTING_COLUMNS, "id": _in_filter(ids)})
        return self._rows(rows, listing_from_row, "listings")

    def get_profiles(self, user_ids: Iterable[str]) -> list[Profile]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        rows = self._call("GET", "profiles", params={"select": "*", "id": _in_filter(ids)})
        return self._rows(rows, profile_from_row, "profiles")

    def list_messages(self, request_ids: Iterable[str]) -> list[Message]:
        ids = list(dict.fromkeys(request_ids))
        if not ids:
            return []
        rows = self._call(
            "GET",
            "messages",
            params={"select": MESSAGE_COLUMNS, "request_id": _in_filter(ids), "order": "created_at.asc"},
        )
        return self._rows(rows, message_from_row, "messages")

    def insert_message(self, request_id: str, sender_id: str, body: str) -> Message:
        rows = self._call(
            "POST",
            "messages",
            params={"select": MESSAGE_COLUMNS},
            json=[{"request_id": request_id, "sender_id": sender_id, "body": body}],
            prefer="return=representation",
        )
        parsed = self._rows(rows, message_from_row, "messages")
        if not parsed:
            raise StoreError("Message insert returned no row")
        return parsed[0]

    def update_request_status(self, request_id: str, status: str) -> BookingRequest:
        rows = self._call(
            "PATCH",
            "requests",
            params={"id": f"eq.{request_id}", "select": "*"},
            json={"status": status},
            prefer="return=representation",
        )
        parsed = self._rows(rows, request_from_row, "requests")
        if not parsed:
            raise StoreError(f"Request {request_id} was not updated")
        return parsed[0]

    def backfill_legacy_note(
        self,
        request_id: str,
        sender_id: str,
        body: str,
        created_at: datetime,
    ) -> Message | None:
        existing = self._find_backfilled(request_id, sender_id, body, created_at)
        if existing is not None:
            # Inserted earlier but the note survived; only the clear is left.
            self._claim_note(request_id)
            return existing

        if not self._claim_note(request_id):
            # Another view cleared the note first and owns the insert.
            return self._find_backfilled(request_id, sender_id, body, created_at)

        try:
            rows = self._call(
                "POST",
                "messages",
                params={"select": MESSAGE_COLUMNS},
                json=[
                    {
                        "request_id": request_id,
                        "sender_id": sender_id,
                        "body": body,
                        "created_at": created_at.isoformat(),
                    }
                ],
                prefer="return=representation",
            )
            parsed = self._rows(rows, message_from_row, "messages")
            if not parsed:
                raise StoreError("Backfill insert returned no row")
        except StoreError:
            self._restore_note(request_id, body)
            raise
        return parsed[0]

    def _claim_note(self, request_id: str) -> bool:
        """Clear the legacy note only if it is still set. True when this call cleared it."""
        rows = self._call(
            "PATCH",
            "requests",
            params={"id": f"eq.{request_id}", "message": "not.is.null", "select": "id"},
            json={"message": None},
            prefer="return=representation",
        )
        return bool(rows)

    def _restore_note(self, request_id: str, body: str) -> None:
        try:
            self._call(
                "PATCH",
                "requests",
                params={"id": f"eq.{request_id}", "message": "is.null"},
                json={"message": body},
                prefer="return=minimal",
            )
        except StoreError as e:
            self._logger.error(
                "Legacy note lost after failed backfill insert",
                extra={"request_id": request_id, "reason": str(e)},
            )

    def _find_backfilled(
        self, request_id: str, sender_id: str, body: str, created_at: datetime
    ) -> Message | None:
        rows = self._call(
            "GET",
            "messages",
            params={
                "select": MESSAGE_COLUMNS,
                "request_id": f"eq.{request_id}",
                "sender_id": f"eq.{sender_id}",
            },
        )
        target = parse_timestamp(created_at)
        for message in self._rows(rows, message_from_row, "messages"):
            if message.body == body and message.created_at == target:
                return message
        return None
