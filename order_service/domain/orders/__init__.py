from order_service.domain.orders.aggregates import (
    TERMINAL_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    money,
)

__all__ = [
    "TERMINAL_STATUSES",
    "Order",
    "OrderItem",
    "OrderStatus",
    "money",
]
