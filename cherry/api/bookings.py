from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from cherry.api.schemas import (
    BookingDetailSchema,
    BookingsResponseSchema,
    CheckoutRequestSchema,
    CheckoutResponseSchema,
    MessageSchema,
    RequestSchema,
    SendMessageRequestSchema,
    UnreadTotalSchema,
    UpdateStatusRequestSchema,
)
from cherry.application.exceptions import (
    AuthError,
    CheckoutError,
    CherryError,
    InvalidTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)
from cherry.application.ports.booking_store import BookingStorePort
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.viewer import Viewer
from cherry.wiring.dependencies import (
    get_access_token,
    get_booking_detail_use_case,
    get_checkout_use_case,
    get_list_bookings_use_case,
    get_store,
    get_unread_total_use_case,
    resolve_viewer,
)


router = APIRouter()
logger = logging.getLogger(__name__)

STATUS_BY_ERROR: list[tuple[type[CherryError], int]] = [
    (NotAuthenticatedError, 401),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (ValidationError, 422),
    (StoreError, 502),
    (CheckoutError, 502),
    (AuthError, 503),
]


def to_http_error(e: CherryError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=500, detail="Internal error")


def current_viewer(access_token: str | None = Depends(get_access_token)) -> Viewer:
    try:
        return resolve_viewer(access_token)
    except AuthError as e:
        raise to_http_error(e)


def request_store(access_token: str | None = Depends(get_access_token)) -> BookingStorePort:
    return get_store(access_token)


@router.get("/bookings", response_model=BookingsResponseSchema)
def list_bookings(
    bucket: Bucket = Query(Bucket.PENDING, alias="filter"),
    viewer: Viewer = Depends(current_viewer),
    store: BookingStorePort = Depends(request_store),
):
    try:
        overview = get_list_bookings_use_case(store).execute(viewer, bucket)
    except CherryError as e:
        raise to_http_error(e)
    return BookingsResponseSchema.from_dto(overview)


@router.get("/dashboard/unread", response_model=UnreadTotalSchema)
def unread_total(
    viewer: Viewer = Depends(current_viewer),
    store: BookingStorePort = Depends(request_store),
):
    try:
        total = get_unread_total_use_case(store).execute(viewer)
    except CherryError as e:
        raise to_http_error(e)
    return UnreadTotalSchema(unread_total=total)


@router.get("/bookings/{request_id}", response_model=BookingDetailSchema)
def booking_detail(
    request_id: str,
    viewer: Viewer = Depends(current_viewer),
    store: BookingStorePort = Depends(request_store),
):
    try:
        detail = get_booking_detail_use_case(store).get(viewer, request_id)
    except CherryError as e:
        raise to_http_error(e)
    return BookingDetailSchema.from_dto(detail)


@router.post("/bookings/{request_id}/messages", response_model=MessageSchema, status_code=201)
def send_message(
    request_id: str,
    req: SendMessageRequestSchema,
    viewer: Viewer = Depends(current_viewer),
    store: BookingStorePort = Depends(request_store),
):
    try:
        message = get_booking_detail_use_case(store).send_message(viewer, request_id, req.body)
    except CherryError as e:
        raise to_http_error(e)
    return MessageSchema.from_entity(message)


@router.post("/bookings/{request_id}/status", response_model=RequestSchema)
def update_status(
    request_id: str,
    req: UpdateStatusRequestSchema,
    viewer: Viewer = Depends(current_viewer),
    store: BookingStorePort = Depends(request_store),
):
    try:
        updated = get_booking_detail_use_case(store).update_status(viewer, request_id, req.status)
    except CherryError as e:
        raise to_http_error(e)
    return RequestSchema.from_entity(updated)


@router.post("/checkout", response_model=CheckoutResponseSchema)
def create_checkout(
    req: CheckoutRequestSchema,
    viewer: Viewer = Depends(current_viewer),
):
    try:
        url = get_checkout_use_case().execute(
            viewer=viewer,
            listing_id=req.listing_id,
            host_id=req.host_id,
            price_cents=req.price_cents,
            guest_id=req.guest_id,
        )
    except (NotAuthenticatedError, PermissionDeniedError, ValidationError) as e:
        raise to_http_error(e)
    except CheckoutError as e:
        logger.error("Checkout failed", extra={"listing_id": req.listing_id, "reason": str(e)})
        raise HTTPException(status_code=502, detail="Could not create checkout session")
    return CheckoutResponseSchema(url=url)
