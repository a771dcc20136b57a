from __future__ import annotations

from cherry.application.exceptions import NotAuthenticatedError, PermissionDeniedError
from cherry.domain.entities.booking_request import BookingRequest
from cherry.domain.entities.listing import Listing
from cherry.domain.entities.viewer import Viewer


def require_viewer(viewer: Viewer) -> str:
    """Return the viewer's user id, raising when there is no session."""
    if not viewer.is_authenticated or not viewer.user_id:
        raise NotAuthenticatedError("Not authenticated")
    return viewer.user_id


def require_participant(user_id: str, request: BookingRequest, listing: Listing) -> None:
    if user_id not in (request.guest_id, listing.host_id):
        raise PermissionDeniedError("Only the guest and the host can access this booking")
