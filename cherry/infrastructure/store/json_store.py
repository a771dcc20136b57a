from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from cherry.application.exceptions import StoreError
from cherry.application.utils.schedule import utc_now
from cherry.infrastructure.store.memory_store import MemoryBookingStore
from cherry.infrastructure.store.rows import (
    listing_from_row,
    listing_to_row,
    message_from_row,
    message_to_row,
    profile_from_row,
    profile_to_row,
    request_from_row,
    request_to_row,
)


class JsonBookingStore(MemoryBookingStore):
    """Memory store persisted to a single JSON file, for local development."""

    def __init__(self, data_file: str = "./data/cherry.json", clock: Callable[[], datetime] = utc_now) -> None:
        super().__init__(clock=clock)
        self._file_path = Path(data_file)
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(__name__)
        self._load()

    def _load(self) -> None:
        """Load tables from the data file; a missing or corrupted file starts empty."""
        if not self._file_path.exists():
            return
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Data file unreadable, starting empty", extra={"reason": str(e)})
            return

        for row in data.get("profiles", []):
            profile = profile_from_row(row)
            self._profiles[profile.id] = profile
        for row in data.get("listings", []):
            listing = listing_from_row(row)
            self._listings[listing.id] = listing
        for row in data.get("requests", []):
            request = request_from_row(row)
            self._requests[request.id] = request
        self._messages = [message_from_row(row) for row in data.get("messages", [])]

    def _commit(self) -> None:
        data: dict[str, Any] = {
            "profiles": [profile_to_row(p) for p in self._profiles.values()],
            "listings": [listing_to_row(l) for l in self._listings.values()],
            "requests": [request_to_row(r) for r in self._requests.values()],
            "messages": [message_to_row(m) for m in self._messages],
            "version": 1,
        }
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise StoreError(f"Could not write {self._file_path}: {e}") from e
