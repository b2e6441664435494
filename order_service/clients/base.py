from __future__ import annotations

import logging
from typing import Any

import httpx

from order_service.domain.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class HttpCollaborator:
    service_name: str = "collaborator"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: int = 10,
        bearer_token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = max(1, timeout_seconds)
        self.bearer_token = bearer_token
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                return client.request(method, url, headers=self._headers(), json=json_body)
        except httpx.HTTPError as exc:
            logger.error("%s call failed: %s %s", self.service_name, method, url, exc_info=True)
            raise UpstreamUnavailableError(self.service_name, f"{self.service_name} service unreachable: {exc}") from exc

    def _unavailable(self, response: httpx.Response) -> UpstreamUnavailableError:
        logger.error(
            "%s responded with status=%s for %s %s",
            self.service_name,
            response.status_code,
            response.request.method,
            response.request.url,
        )
        return UpstreamUnavailableError(
            self.service_name,
            f"{self.service_name} service returned status {response.status_code}",
        )

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(self.service_name, f"{self.service_name} returned a malformed body") from exc
