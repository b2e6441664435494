from __future__ import annotations

from typing import Any


class OrderServiceError(Exception):
    code = "order_service_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class ValidationError(OrderServiceError):
    code = "validation_error"


class NotFoundError(OrderServiceError):
    code = "not_found"

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found: id={identifier}")
        self.resource = resource
        self.identifier = identifier


class UpstreamUnavailableError(OrderServiceError):
    code = "upstream_unavailable"

    def __init__(self, service: str, message: str | None = None):
        super().__init__(message or f"{service} service unavailable")
        self.service = service


class StockAdjustmentError(UpstreamUnavailableError):
    """Order persisted, but the catalog stock decrement did not complete.

    ``applied`` lists the product ids whose decrement already went through;
    the remaining items were not decremented and need manual reconciliation.
    """

    code = "stock_adjustment_incomplete"

    def __init__(self, order_id: int, product_id: int, applied: list[int]):
        super().__init__(
            "product_catalog",
            f"order {order_id} was created but stock adjustment failed for product {product_id}; "
            f"stock already adjusted for products {applied}",
        )
        self.order_id = order_id
        self.product_id = product_id
        self.applied = list(applied)

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["order_id"] = self.order_id
        return body


class StockReservationUnrecordedError(OrderServiceError):
    """Order persisted and catalog stock adjusted, but the per-item
    ``stock_reserved`` flags could not be written."""

    code = "stock_reservation_unrecorded"

    def __init__(self, order_id: int, applied: list[int]):
        super().__init__(
            f"order {order_id} was created and stock adjusted for products {applied}, "
            "but the reservation flags could not be recorded"
        )
        self.order_id = order_id
        self.applied = list(applied)

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["order_id"] = self.order_id
        return body


class InsufficientStockError(OrderServiceError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int):
        super().__init__(
            f"insufficient stock for product {product_id}: available={available}, requested={requested}"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class InvalidTransitionError(OrderServiceError):
    code = "invalid_transition"

    def __init__(self, order_id: int | None, status: str):
        super().__init__(f"order {order_id} is {status} and can no longer be modified")
        self.order_id = order_id
        self.status = status


class ConcurrentModificationError(OrderServiceError):
    code = "concurrent_modification"

    def __init__(self, order_id: int, expected_version: int):
        super().__init__(f"order {order_id} was modified concurrently (expected version {expected_version})")
        self.order_id = order_id
        self.expected_version = expected_version
