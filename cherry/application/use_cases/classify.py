from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from cherry.application.utils.schedule import effective_end
from cherry.domain.entities.anomaly import Anomaly
from cherry.domain.entities.booking_request import BookingRequest, RequestStatus
from cherry.domain.entities.bucket import Bucket
from cherry.domain.entities.listing import Listing


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    matched: list[BookingRequest]
    anomalies: list[Anomaly]


def buckets_for(request: BookingRequest, listing: Listing, now: datetime, tz: ZoneInfo) -> frozenset[Bucket]:
    """
    Buckets a request with a resolved listing falls into.

    `all` always matches. A declined request whose listing has not ended
    matches nothing else.
    """
    end = effective_end(listing, tz)
    ended = end is not None and end < now
    matched = {Bucket.ALL}

    if request.has_status(RequestStatus.PENDING):
        matched.add(Bucket.PENDING)
    elif request.has_status(RequestStatus.ACCEPTED):
        matched.add(Bucket.PAST if ended else Bucket.UPCOMING)
    elif request.has_status(RequestStatus.DECLINED) and ended:
        matched.add(Bucket.PAST)

    return frozenset(matched)


def classify(
    requests: Iterable[BookingRequest],
    listings_by_id: Mapping[str, Listing],
    bucket: Bucket,
    now: datetime,
    tz: ZoneInfo,
) -> Classification:
    matched: list[BookingRequest] = []
    anomalies: list[Anomaly] = []

    for request in requests:
        listing = listings_by_id.get(request.listing_id)
        if listing is None:
            logger.warning(
                "Request references a listing that did not resolve",
                extra={"request_id": request.id, "listing_id": request.listing_id},
            )
            anomalies.append(
                Anomaly(
                    kind="listing_unresolved",
                    request_id=request.id,
                    reference_id=request.listing_id,
                    detail="listing not found or not visible",
                )
            )
            continue
        if bucket in buckets_for(request, listing, now, tz):
            matched.append(request)

    matched.sort(key=lambda r: r.created_at, reverse=True)
    return Classification(matched=matched, anomalies=anomalies)
