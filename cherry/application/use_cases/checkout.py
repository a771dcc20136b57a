from __future__ import annotations

import logging

from cherry.application.exceptions import PermissionDeniedError, ValidationError
from cherry.application.ports.checkout import CheckoutPort
from cherry.application.utils.access import require_viewer
from cherry.domain.entities.viewer import Viewer


class CreateCheckoutUseCase:
    def __init__(self, checkout: CheckoutPort) -> None:
        self._checkout = checkout
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        viewer: Viewer,
        listing_id: str,
        host_id: str,
        price_cents: int,
        guest_id: str | None = None,
    ) -> str:
        """
        Create a checkout session paid by the viewer. Returns the redirect URL.

        The guest recorded in the session metadata is always the viewer; a
        different `guest_id` is refused.
        """
        user_id = require_viewer(viewer)
        if guest_id is not None and guest_id != user_id:
            raise PermissionDeniedError("Checkout can only be started for yourself")
        if price_cents <= 0:
            raise ValidationError("price_cents must be a positive integer")

        url = self._checkout.create_session(
            price_cents=price_cents,
            metadata={"listingId": listing_id, "hostId": host_id, "guestId": user_id},
        )
        self._logger.info("Checkout session created", extra={"listing_id": listing_id, "viewer_id": user_id})
        return url
