from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from cherry.domain.entities.listing import Listing


logger = logging.getLogger(__name__)


def parse_time_of_day(value: str | None) -> time | None:
    """Parse a stored time of day ("HH:MM" or "HH:MM:SS")."""
    if not value:
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_date(value: str | date | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a store timestamp into an aware UTC datetime.

    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def effective_end(listing: Listing | None, tz: ZoneInfo) -> datetime | None:
    """Instant after which the listing counts as expired, or None if undetermined."""
    if listing is None or listing.available_date is None or not listing.end_time:
        return None
    end = parse_time_of_day(listing.end_time)
    if end is None:
        logger.warning(
            "Unparseable listing end time",
            extra={"listing_id": listing.id, "reason": listing.end_time},
        )
        return None
    return datetime.combine(listing.available_date, end, tzinfo=tz)


def effective_start(listing: Listing | None, tz: ZoneInfo) -> datetime | None:
    if listing is None or listing.available_date is None or not listing.start_time:
        return None
    start = parse_time_of_day(listing.start_time)
    if start is None:
        return None
    return datetime.combine(listing.available_date, start, tzinfo=tz)


def is_expired(listing: Listing | None, now: datetime, tz: ZoneInfo) -> bool:
    end = effective_end(listing, tz)
    return end is not None and end < now


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def safe_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning("Unknown timezone, falling back to UTC", extra={"reason": name})
        return ZoneInfo("UTC")
