"""Order fulfillment orchestration.

``create_order`` coordinates the membership and product catalog services with
one local write. Steps before the write are side-effect free. The stock
decrements that follow the write are best-effort: they are not retried and
not compensated, so a failure there leaves a persisted order with partially
adjusted catalog stock. That case is raised as ``StockAdjustmentError`` and
the items already decremented are flagged ``stock_reserved`` so an operator
can reconcile the rest. If the flags themselves cannot be written after every
decrement succeeded, ``StockReservationUnrecordedError`` carries the order id.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from order_service.clients.catalog import ProductCatalogClient
from order_service.clients.membership import MembershipClient
from order_service.core.config import Settings, get_settings
from order_service.core.utils import now_utc
from order_service.domain.errors import (
    InsufficientStockError,
    NotFoundError,
    OrderServiceError,
    StockAdjustmentError,
    StockReservationUnrecordedError,
    ValidationError,
)
from order_service.domain.orders.aggregates import Order, OrderItem, OrderStatus
from order_service.persistence.store import OrderFilter, OrderStore

logger = logging.getLogger(__name__)


def _parse_status(value: OrderStatus | str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError(f"unknown order status {value!r}; expected one of {allowed}") from exc


class OrderObserver(Protocol):
    def order_created(self, order: Order) -> None:
        ...

    def status_changed(self, order: Order, previous: OrderStatus) -> None:
        ...


class OrderOrchestrator:
    def __init__(
        self,
        store: OrderStore,
        membership: MembershipClient,
        catalog: ProductCatalogClient,
        observer: OrderObserver | None = None,
        settings: Settings | None = None,
    ):
        self.store = store
        self.membership = membership
        self.catalog = catalog
        self.observer = observer
        self.settings = settings or get_settings()

    # ── creation ────────────────────────────────────

    def _validate_request(self, shipping_address: str, items: list[tuple[int, int]]) -> None:
        if not items:
            raise ValidationError("an order must contain at least one item")

        min_len = self.settings.shipping_address_min_length
        max_len = self.settings.shipping_address_max_length
        if not isinstance(shipping_address, str) or not (min_len <= len(shipping_address) <= max_len):
            raise ValidationError(f"shipping address must be between {min_len} and {max_len} characters")

        for product_id, quantity in items:
            if product_id is None:
                raise ValidationError("product id is required for every item")
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
                raise ValidationError(f"quantity for product {product_id} must be at least 1")

    def _build_items(self, items: list[tuple[int, int]]) -> tuple[OrderItem, ...]:
        snapshots: list[OrderItem] = []
        for product_id, quantity in items:
            logger.debug("fetching product snapshot product_id=%s", product_id)
            product = self.catalog.get_product(product_id)
            if product.stock < quantity:
                raise InsufficientStockError(product_id, product.stock, quantity)
            snapshots.append(OrderItem.snapshot(product_id, quantity, product))
        return tuple(snapshots)

    def _decrement_stock(self, order: Order) -> Order:
        applied_items: list[OrderItem] = []
        for item in order.items:
            try:
                self.catalog.adjust_stock(item.product_id, -item.quantity)
            except OrderServiceError as exc:
                applied = [done.product_id for done in applied_items]
                logger.warning(
                    "stock adjustment incomplete: order_id=%s product_id=%s applied=%s error=%s",
                    order.id,
                    item.product_id,
                    applied,
                    exc,
                )
                try:
                    self.store.mark_stock_reserved(order.id, [done.id for done in applied_items])
                except Exception:
                    logger.exception("could not flag reserved items: order_id=%s applied=%s", order.id, applied)
                raise StockAdjustmentError(order.id, item.product_id, applied) from exc
            applied_items.append(item)

        applied = [item.product_id for item in applied_items]
        try:
            return self.store.mark_stock_reserved(order.id, [item.id for item in applied_items])
        except Exception as exc:
            logger.exception("could not flag reserved items: order_id=%s applied=%s", order.id, applied)
            raise StockReservationUnrecordedError(order.id, applied) from exc

    def create_order(self, user_id: int, shipping_address: str, items: Iterable[tuple[int, int]]) -> Order:
        lines = [(product_id, quantity) for product_id, quantity in items]
        logger.debug("creating order user_id=%s lines=%s", user_id, len(lines))
        self._validate_request(shipping_address, lines)

        if not self.membership.user_exists(user_id):
            raise NotFoundError("user", user_id)

        order = Order(
            user_id=user_id,
            shipping_address=shipping_address,
            items=self._build_items(lines),
            status=OrderStatus.PENDING,
            order_date=now_utc(),
        )
        order.recompute_totals()

        saved = self.store.save(order)
        saved = self._decrement_stock(saved)

        logger.info("order created: id=%s total_amount=%s", saved.id, saved.total_amount)
        self._notify("order_created", saved)
        return saved

    # ── status changes ──────────────────────────────

    def update_status(self, order_id: int, new_status: OrderStatus) -> Order:
        logger.debug("updating order %s to %s", order_id, new_status)
        target = _parse_status(new_status)
        order = self.get_order(order_id)
        previous = order.update_status(target)
        updated = self.store.update(order)
        logger.info("order %s status changed: %s -> %s", order_id, previous.value, updated.status.value)
        self._notify("status_changed", updated, previous)
        return updated

    def cancel(self, order_id: int) -> Order:
        logger.debug("cancelling order %s", order_id)
        order = self.get_order(order_id)
        previous = order.cancel()
        updated = self.store.update(order)
        logger.info("order %s cancelled (was %s)", order_id, previous.value)
        self._notify("status_changed", updated, previous)
        return updated

    # ── queries ─────────────────────────────────────

    def get_order(self, order_id: int) -> Order:
        logger.debug("loading order %s", order_id)
        order = self.store.get(order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        return order

    def list_orders(self) -> list[Order]:
        logger.debug("listing all orders")
        return self.store.list()

    def list_by_user(self, user_id: int) -> list[Order]:
        logger.debug("listing orders for user %s", user_id)
        return self.store.list(OrderFilter(user_id=user_id))

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        logger.debug("listing orders with status %s", status)
        return self.store.list(OrderFilter(status=_parse_status(status)))

    def is_product_referenced(self, product_id: int) -> bool:
        return self.store.exists_item_for_product(product_id)

    def _notify(self, hook: str, *args) -> None:
        if self.observer is None:
            return
        try:
            getattr(self.observer, hook)(*args)
        except Exception:
            logger.exception("order observer hook %s failed", hook)
