from __future__ import annotations

import logging

from cherry.application.ports.auth import AuthPort
from cherry.domain.entities.viewer import Viewer


class MockAuth(AuthPort):
    """Development auth: the bearer token is taken to be the user id."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, access_token: str | None) -> Viewer:
        if not access_token or not access_token.strip():
            return Viewer.anonymous()
        self._logger.debug("Mock auth resolved viewer", extra={"viewer_id": access_token})
        return Viewer.of(access_token.strip())
