from __future__ import annotations

from typing import Protocol

import httpx

from order_service.clients.base import HttpCollaborator
from order_service.core.config import Settings, get_settings


class MembershipClient(Protocol):
    def user_exists(self, user_id: int) -> bool:
        ...


class HttpMembershipClient(HttpCollaborator):
    service_name = "membership"

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        bearer_token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> HttpMembershipClient:
        settings = settings or get_settings()
        return cls(
            settings.membership_service_url,
            timeout_seconds=settings.http_timeout_seconds,
            bearer_token=bearer_token,
            transport=transport,
        )

    def user_exists(self, user_id: int) -> bool:
        response = self._request("GET", f"/api/v1/users/{user_id}")
        if response.status_code == 404:
            return False
        if response.is_success:
            return True
        raise self._unavailable(response)
