from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer

from order_service.domain.orders.aggregates import Order, OrderItem, OrderStatus


class OrderLineRequest(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    user_id: int
    shipping_address: str = Field(min_length=10, max_length=200)
    items: list[OrderLineRequest] = Field(min_length=1)

    def to_lines(self) -> list[tuple[int, int]]:
        return [(line.product_id, line.quantity) for line in self.items]


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int | None
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @field_serializer("unit_price", "subtotal")
    def _money(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_domain(cls, item: OrderItem) -> OrderItemResponse:
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )


class OrderResponse(BaseModel):
    id: int | None
    user_id: int
    order_date: datetime | None
    status: OrderStatus
    total_amount: Decimal
    shipping_address: str
    items: list[OrderItemResponse]
    created_at: datetime | None
    updated_at: datetime | None

    @field_serializer("total_amount")
    def _money(self, value: Decimal) -> str:
        return str(value)

    @classmethod
    def from_domain(cls, order: Order) -> OrderResponse:
        return cls(
            id=order.id,
            user_id=order.user_id,
            order_date=order.order_date,
            status=order.status,
            total_amount=order.total_amount,
            shipping_address=order.shipping_address,
            items=[OrderItemResponse.from_domain(item) for item in order.items],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
