from functools import lru_cache
import logging

import httpx
from fastapi import Header

from cherry.application.ports.auth import AuthPort
from cherry.application.ports.booking_store import BookingStorePort
from cherry.application.ports.checkout import CheckoutPort
from cherry.application.use_cases.backfill import BackfillLegacyNoteUseCase
from cherry.application.use_cases.booking_detail import BookingDetailUseCase
from cherry.application.use_cases.checkout import CreateCheckoutUseCase
from cherry.application.use_cases.list_bookings import ListBookingsUseCase, UnreadTotalUseCase
from cherry.application.utils.schedule import safe_timezone
from cherry.core.config import settings
from cherry.domain.entities.viewer import Viewer
from cherry.infrastructure.auth.mock_auth import MockAuth
from cherry.infrastructure.auth.supabase_auth import SupabaseAuth
from cherry.infrastructure.payments.mock_checkout import MockCheckout
from cherry.infrastructure.payments.stripe_checkout import StripeCheckout
from cherry.infrastructure.store.json_store import JsonBookingStore
from cherry.infrastructure.store.memory_store import MemoryBookingStore
from cherry.infrastructure.store.supabase_store import SupabaseBookingStore


logger = logging.getLogger(__name__)

_local_store: MemoryBookingStore | None = None


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local", "test"}


def get_access_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_local_store() -> MemoryBookingStore:
    global _local_store
    if _local_store is None:
        if settings.STORE_PROVIDER.lower() == "json":
            _local_store = JsonBookingStore(data_file=settings.DATA_FILE)
        else:
            _local_store = MemoryBookingStore()
    return _local_store


@lru_cache
def get_http_client() -> httpx.Client:
    return httpx.Client(timeout=settings.SUPABASE_TIMEOUT_SECONDS)


def get_store(access_token: str | None = None) -> BookingStorePort:
    """Supabase store bound to the caller's token, or the shared local store."""
    if settings.STORE_PROVIDER.lower() == "supabase":
        return SupabaseBookingStore(access_token=access_token, client=get_http_client())
    return get_local_store()


@lru_cache
def get_auth() -> AuthPort:
    if settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY:
        return SupabaseAuth()
    if _is_local():
        logger.info("Using MockAuth (Supabase not configured, ENV=%s)", settings.ENV)
        return MockAuth()
    raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required outside dev/local.")


@lru_cache
def get_checkout() -> CheckoutPort:
    if settings.STRIPE_SECRET_KEY:
        return StripeCheckout()
    if _is_local():
        logger.info("Using MockCheckout (STRIPE_SECRET_KEY missing, ENV=%s)", settings.ENV)
        return MockCheckout()
    raise ValueError("STRIPE_SECRET_KEY is required to create checkout sessions.")


def get_list_bookings_use_case(store: BookingStorePort) -> ListBookingsUseCase:
    return ListBookingsUseCase(
        store=store,
        timezone=safe_timezone(settings.CHERRY_TIMEZONE),
        name_fallback=settings.DISPLAY_NAME_FALLBACK,
    )


def get_unread_total_use_case(store: BookingStorePort) -> UnreadTotalUseCase:
    return UnreadTotalUseCase(store=store, timezone=safe_timezone(settings.CHERRY_TIMEZONE))


def get_booking_detail_use_case(store: BookingStorePort) -> BookingDetailUseCase:
    return BookingDetailUseCase(
        store=store,
        backfill=BackfillLegacyNoteUseCase(store),
        name_fallback=settings.DISPLAY_NAME_FALLBACK,
    )


def get_checkout_use_case() -> CreateCheckoutUseCase:
    return CreateCheckoutUseCase(checkout=get_checkout())


def resolve_viewer(access_token: str | None) -> Viewer:
    return get_auth().resolve(access_token)
