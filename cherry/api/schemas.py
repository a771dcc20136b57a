from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from cherry.application.dto.bookings import BookingDetail, BookingsOverview, BookingSummary
from cherry.domain.entities.anomaly import Anomaly
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.message import Message


class AnomalySchema(BaseModel):
    kind: str
    request_id: str | None = None
    reference_id: str | None = None
    detail: str = ""

    @staticmethod
    def from_entity(a: Anomaly) -> "AnomalySchema":
        return AnomalySchema(kind=a.kind, request_id=a.request_id, reference_id=a.reference_id, detail=a.detail)


class BookingSummarySchema(BaseModel):
    request_id: str
    listing_id: str
    listing_title: str
    status: str
    role: str
    counterparty_id: str | None = None
    counterparty_name: str
    available_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str = ""
    unread_count: int = 0
    created_at: datetime

    @staticmethod
    def from_dto(s: BookingSummary) -> "BookingSummarySchema":
        return BookingSummarySchema(
            request_id=s.request_id,
            listing_id=s.listing_id,
            listing_title=s.listing_title,
            status=s.status,
            role=s.role,
            counterparty_id=s.counterparty_id,
            counterparty_name=s.counterparty_name,
            available_date=s.available_date,
            start_time=s.start_time,
            end_time=s.end_time,
            location=s.location,
            unread_count=s.unread_count,
            created_at=s.created_at,
        )


class BookingsResponseSchema(BaseModel):
    filter: Bucket
    bookings: list[BookingSummarySchema]
    anomalies: list[AnomalySchema] = Field(default_factory=list)

    @staticmethod
    def from_dto(o: BookingsOverview) -> "BookingsResponseSchema":
        return BookingsResponseSchema(
            filter=o.bucket,
            bookings=[BookingSummarySchema.from_dto(s) for s in o.bookings],
            anomalies=[AnomalySchema.from_entity(a) for a in o.anomalies],
        )


class UnreadTotalSchema(BaseModel):
    unread_total: int


class MessageSchema(BaseModel):
    id: str
    request_id: str
    sender_id: str
    body: str
    created_at: datetime

    @staticmethod
    def from_entity(m: Message) -> "MessageSchema":
        return MessageSchema(
            id=m.id, request_id=m.request_id, sender_id=m.sender_id, body=m.body, created_at=m.created_at
        )


class ThreadMessageSchema(MessageSchema):
    sender_name: str
    mine: bool


class RequestSchema(BaseModel):
    id: str
    listing_id: str
    guest_id: str
    status: str
    requested_date: date | None = None
    created_at: datetime

    @staticmethod
    def from_entity(r: BookingRequest) -> "RequestSchema":
        return RequestSchema(
            id=r.id,
            listing_id=r.listing_id,
            guest_id=r.guest_id,
            status=r.status,
            requested_date=r.requested_date,
            created_at=r.created_at,
        )


class ListingSchema(BaseModel):
    id: str
    host_id: str
    title: str
    available_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str = ""


class BookingDetailSchema(BaseModel):
    request: RequestSchema
    listing: ListingSchema
    host_name: str
    guest_name: str
    is_host: bool
    is_guest: bool
    can_decide: bool
    messages: list[ThreadMessageSchema]

    @staticmethod
    def from_dto(d: BookingDetail) -> "BookingDetailSchema":
        return BookingDetailSchema(
            request=RequestSchema.from_entity(d.request),
            listing=ListingSchema(
                id=d.listing.id,
                host_id=d.listing.host_id,
                title=d.listing.title,
                available_date=d.listing.available_date,
                start_time=d.listing.start_time,
                end_time=d.listing.end_time,
                location=d.listing.location_label(),
            ),
            host_name=d.host_name,
            guest_name=d.guest_name,
            is_host=d.is_host,
            is_guest=d.is_guest,
            can_decide=d.can_decide,
            messages=[
                ThreadMessageSchema(
                    id=t.message.id,
                    request_id=t.message.request_id,
                    sender_id=t.message.sender_id,
                    body=t.message.body,
                    created_at=t.message.created_at,
                    sender_name=t.sender_name,
                    mine=t.mine,
                )
                for t in d.messages
            ],
        )


class SendMessageRequestSchema(BaseModel):
    body: str


class UpdateStatusRequestSchema(BaseModel):
    status: str


class CheckoutRequestSchema(BaseModel):
    listing_id: str
    host_id: str
    guest_id: str | None = None
    price_cents: int


class CheckoutResponseSchema(BaseModel):
    url: str
