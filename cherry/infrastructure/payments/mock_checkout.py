from __future__ import annotations

import logging
import uuid

from cherry.application.ports.checkout import CheckoutPort
from cherry.core.config import settings


class MockCheckout(CheckoutPort):
    def __init__(self, site_url: str | None = None) -> None:
        self._site_url = (site_url or settings.SITE_URL).rstrip("/")
        self._logger = logging.getLogger(__name__)

    def create_session(self, price_cents: int, metadata: dict[str, str]) -> str:
        session_id = f"cs_mock_{uuid.uuid4().hex[:16]}"
        self._logger.info(
            "Mock checkout session",
            extra={"listing_id": metadata.get("listingId"), "price_cents": price_cents},
        )
        return f"{self._site_url}/dashboard/bookings?success=true&session_id={session_id}"
