from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from order_service.domain.errors import InvalidTransitionError, ValidationError

if TYPE_CHECKING:
    from order_service.clients.catalog import ProductSnapshot


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

MONEY_PLACES = 2


def money(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a monetary amount: {value!r}")
    # str() first so JSON floats like 19.99 keep their printed digits.
    return Decimal(str(value))


def has_money_scale(value: Decimal) -> bool:
    # Amounts are stored as Numeric(14, 2); a finer scale would be rounded on
    # write and break total == sum(subtotals) after a reload.
    if not value.is_finite():
        return False
    return value.as_tuple().exponent >= -MONEY_PLACES


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal = field(init=False)
    id: int | None = None
    stock_reserved: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationError(f"quantity for product {self.product_id} must be at least 1")
        price = money(self.unit_price)
        if not has_money_scale(price) or price <= 0:
            raise ValidationError(
                f"unit price for product {self.product_id} must be positive with at most {MONEY_PLACES} decimal places"
            )
        object.__setattr__(self, "unit_price", price)
        object.__setattr__(self, "subtotal", price * self.quantity)

    @classmethod
    def snapshot(cls, product_id: int, quantity: int, product: ProductSnapshot) -> OrderItem:
        return cls(
            product_id=product_id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
        )


@dataclass
class Order:
    """Aggregate root. Items are frozen snapshots owned by the order.

    Status is the only field that changes after the order is stored.
    """

    user_id: int
    shipping_address: str
    items: tuple[OrderItem, ...]
    status: OrderStatus = OrderStatus.PENDING
    order_date: datetime | None = None
    total_amount: Decimal = Decimal("0")
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    def recompute_totals(self) -> Decimal:
        self.total_amount = sum((item.subtotal for item in self.items), Decimal("0"))
        return self.total_amount

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def update_status(self, new_status: OrderStatus) -> OrderStatus:
        # Only the terminal guard is enforced; any non-terminal status may move
        # to any other status, including itself.
        if self.is_terminal:
            raise InvalidTransitionError(self.id, self.status.value)
        previous = self.status
        self.status = OrderStatus(new_status)
        return previous

    def cancel(self) -> OrderStatus:
        return self.update_status(OrderStatus.CANCELLED)
