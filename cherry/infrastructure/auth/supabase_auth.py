from __future__ import annotations

import logging

import httpx

from cherry.application.exceptions import AuthError
from cherry.application.ports.auth import AuthPort
from cherry.core.config import settings
from cherry.domain.entities.viewer import Viewer


class SupabaseAuth(AuthPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.SUPABASE_URL or "").rstrip("/")
        self._api_key = api_key or settings.SUPABASE_ANON_KEY
        if not self._base_url or not self._api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required for Supabase auth")
        self._client = client or httpx.Client(timeout=settings.SUPABASE_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def resolve(self, access_token: str | None) -> Viewer:
        if not access_token:
            return Viewer.anonymous()

        headers = {"apikey": self._api_key, "Authorization": f"Bearer {access_token}"}
        try:
            resp = self._client.get(f"{self._base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Auth service unreachable", extra={"reason": str(e)})
            raise AuthError("Authentication service unavailable") from e

        if resp.status_code in (401, 403):
            return Viewer.anonymous()
        if resp.status_code >= 400:
            self._logger.error("Auth lookup failed", extra={"status": resp.status_code})
            raise AuthError(f"Authentication service returned {resp.status_code}")

        user_id = (resp.json() or {}).get("id")
        if not user_id:
            return Viewer.anonymous()
        return Viewer.of(str(user_id))
