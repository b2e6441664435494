from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from order_service.clients.base import HttpCollaborator
from order_service.core.config import Settings, get_settings
from order_service.domain.errors import InsufficientStockError, NotFoundError, UpstreamUnavailableError
from order_service.domain.orders.aggregates import MONEY_PLACES, has_money_scale, money


@dataclass(frozen=True)
class ProductSnapshot:
    id: int
    name: str
    price: Decimal
    stock: int
    active: bool = True


class ProductCatalogClient(Protocol):
    def get_product(self, product_id: int) -> ProductSnapshot:
        ...

    def adjust_stock(self, product_id: int, delta: int) -> ProductSnapshot:
        ...


class HttpProductCatalogClient(HttpCollaborator):
    service_name = "product_catalog"

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        bearer_token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> HttpProductCatalogClient:
        settings = settings or get_settings()
        return cls(
            settings.product_service_url,
            timeout_seconds=settings.http_timeout_seconds,
            bearer_token=bearer_token,
            transport=transport,
        )

    def _snapshot(self, product_id: int, payload: Any) -> ProductSnapshot:
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(self.service_name, "product payload is not an object")
        try:
            price = money(payload["price"])
            snapshot = ProductSnapshot(
                id=int(payload.get("id", product_id)),
                name=str(payload["name"]),
                price=price,
                stock=int(payload["stock"]),
                active=bool(payload.get("active", True)),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise UpstreamUnavailableError(self.service_name, f"malformed product payload: {exc}") from exc
        if not has_money_scale(price) or price <= 0:
            raise UpstreamUnavailableError(
                self.service_name,
                f"malformed product payload: price {payload['price']!r} is not a positive amount "
                f"with at most {MONEY_PLACES} decimal places",
            )
        return snapshot

    def get_product(self, product_id: int) -> ProductSnapshot:
        response = self._request("GET", f"/api/v1/products/{product_id}")
        if response.status_code == 404:
            raise NotFoundError("product", product_id)
        if not response.is_success:
            raise self._unavailable(response)
        return self._snapshot(product_id, self._json(response))

    def adjust_stock(self, product_id: int, delta: int) -> ProductSnapshot:
        # The catalog stock endpoint takes an absolute value, so the delta is
        # applied to a fresh read. The catalog also rejects negative stock.
        current = self.get_product(product_id)
        new_stock = current.stock + delta
        if new_stock < 0:
            raise InsufficientStockError(product_id, current.stock, -delta)

        response = self._request(
            "PATCH",
            f"/api/v1/products/{product_id}/stock",
            json_body={"stock": new_stock},
        )
        if response.status_code == 404:
            raise NotFoundError("product", product_id)
        if not response.is_success:
            raise self._unavailable(response)
        if not response.content:
            return ProductSnapshot(
                id=current.id,
                name=current.name,
                price=current.price,
                stock=new_stock,
                active=current.active,
            )
        return self._snapshot(product_id, self._json(response))
