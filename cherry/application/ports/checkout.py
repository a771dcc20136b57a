from __future__ import annotations

from abc import ABC, abstractmethod


class CheckoutPort(ABC):
    @abstractmethod
    def create_session(self, price_cents: int, metadata: dict[str, str]) -> str:
        """Create a hosted checkout session. Returns the redirect URL."""
        raise NotImplementedError
