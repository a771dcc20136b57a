from __future__ import annotations

import logging

import httpx

from cherry.application.exceptions import CheckoutError
from cherry.application.ports.checkout import CheckoutPort
from cherry.core.config import settings


class StripeCheckout(CheckoutPort):
    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        site_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._secret_key = secret_key or settings.STRIPE_SECRET_KEY
        self._api_base = (api_base or settings.STRIPE_API_BASE).rstrip("/")
        self._site_url = (site_url or settings.SITE_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._secret_key:
            raise ValueError("STRIPE_SECRET_KEY is required for Stripe checkout")

    def create_session(self, price_cents: int, metadata: dict[str, str]) -> str:
        form = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][price_data][currency]": settings.CHECKOUT_CURRENCY,
            "line_items[0][price_data][product_data][name]": settings.CHECKOUT_PRODUCT_NAME,
            "line_items[0][price_data][unit_amount]": str(price_cents),
            "line_items[0][quantity]": "1",
            "success_url": f"{self._site_url}/dashboard/bookings?success=true",
            "cancel_url": f"{self._site_url}/dashboard/bookings?canceled=true",
        }
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value

        try:
            resp = self._client.post(
                f"{self._api_base}/checkout/sessions",
                data=form,
                auth=(self._secret_key, ""),
            )
        except httpx.HTTPError as e:
            self._logger.error("Stripe unreachable", extra={"reason": str(e)})
            raise CheckoutError("Payment provider unavailable") from e

        if resp.status_code >= 400:
            try:
                error_message = resp.json().get("error", {}).get("message")
            except Exception:
                error_message = resp.text
            self._logger.error(
                "Stripe checkout session failed",
                extra={"status": resp.status_code, "reason": error_message},
            )
            raise CheckoutError(error_message or f"Payment provider returned {resp.status_code}")

        url = resp.json().get("url")
        if not url:
            raise CheckoutError("Payment provider returned no checkout URL")
        return url
