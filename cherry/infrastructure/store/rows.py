"""Conversion between store rows (plain dicts) and domain entities."""

from __future__ import annotations

from typing import Any

from cherry.application.utils.schedule import parse_date, parse_timestamp
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.message import Message
from cherry.domain.entities.profile import Profile


def request_from_row(row: dict[str, Any]) -> BookingRequest:
    created_at = parse_timestamp(row.get("created_at"))
    if created_at is None:
        raise ValueError(f"Request {row.get('id')} has no valid created_at")
    return BookingRequest(
        id=str(row["id"]),
        listing_id=str(row["listing_id"]),
        guest_id=str(row["guest_id"]),
        status=str(row.get("status") or "pending"),
        created_at=created_at,
        message=row.get("message") or None,
        requested_date=parse_date(row.get("requested_date")),
    )


def request_to_row(request: BookingRequest) -> dict[str, Any]:
    return {
        "id": request.id,
        "listing_id": request.listing_id,
        "guest_id": request.guest_id,
        "message": request.message,
        "requested_date": request.requested_date.isoformat() if request.requested_date else None,
        "status": request.status,
        "created_at": request.created_at.isoformat(),
    }


def listing_from_row(row: dict[str, Any]) -> Listing:
    return Listing(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        title=row.get("title") or "",
        description=row.get("description"),
        location=row.get("location"),
        city=row.get("city"),
        state=row.get("state"),
        available_date=parse_date(row.get("available_date")),
        start_time=row.get("start_time"),
        end_time=row.get("end_time"),
        is_booked=bool(row.get("is_booked", False)),
    )


def listing_to_row(listing: Listing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "user_id": listing.user_id,
        "title": listing.title,
        "description": listing.description,
        "location": listing.location,
        "city": listing.city,
        "state": listing.state,
        "available_date": listing.available_date.isoformat() if listing.available_date else None,
        "start_time": listing.start_time,
        "end_time": listing.end_time,
        "is_booked": listing.is_booked,
    }


def message_from_row(row: dict[str, Any]) -> Message:
    created_at = parse_timestamp(row.get("created_at"))
    if created_at is None:
        raise ValueError(f"Message {row.get('id')} has no valid created_at")
    return Message(
        id=str(row["id"]),
        request_id=str(row["request_id"]),
        sender_id=str(row["sender_id"]),
        body=row.get("body") or "",
        created_at=created_at,
    )


def message_to_row(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "request_id": message.request_id,
        "sender_id": message.sender_id,
        "body": message.body,
        "created_at": message.created_at.isoformat(),
    }


def profile_from_row(row: dict[str, Any]) -> Profile:
    interests = row.get("interests") or ()
    if isinstance(interests, str):
        interests = interests.split(",")
    return Profile(
        id=str(row["id"]),
        full_name=row.get("full_name"),
        role=row.get("role"),
        bio=row.get("bio"),
        age=row.get("age"),
        interests=tuple(i.strip() for i in interests if i and i.strip()),
        linkedin_url=row.get("linkedin_url"),
        avatar_url=row.get("avatar_url"),
    )


def profile_to_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "full_name": profile.full_name,
        "role": profile.role,
        "bio": profile.bio,
        "age": profile.age,
        "interests": list(profile.interests),
        "linkedin_url": profile.linkedin_url,
        "avatar_url": profile.avatar_url,
    }
