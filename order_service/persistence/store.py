from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from sqlalchemy import Select, exists, select, update
from sqlalchemy.orm import Session, sessionmaker

from order_service.core.utils import now_utc
from order_service.domain.errors import ConcurrentModificationError, NotFoundError
from order_service.domain.orders.aggregates import Order, OrderItem, OrderStatus
from order_service.persistence import db
from order_service.persistence.models import OrderItemModel, OrderModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderFilter:
    user_id: int | None = None
    status: OrderStatus | None = None


class OrderStore(Protocol):
    def save(self, order: Order) -> Order:
        ...

    def get(self, order_id: int) -> Order | None:
        ...

    def list(self, filter: OrderFilter | None = None) -> list[Order]:
        ...

    def update(self, order: Order) -> Order:
        ...

    def exists_item_for_product(self, product_id: int) -> bool:
        ...

    def mark_stock_reserved(self, order_id: int, item_ids: Iterable[int]) -> Order:
        ...


def _to_domain(row: OrderModel) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        shipping_address=row.shipping_address,
        items=tuple(
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                stock_reserved=item.stock_reserved,
            )
            for item in row.items
        ),
        status=OrderStatus(row.status),
        order_date=row.order_date,
        total_amount=row.total_amount,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


class SqlOrderStore:
    """Order aggregate persistence; every call runs in its own transaction."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self.session_factory = session_factory

    def _load(self, session: Session, order_id: int) -> Order | None:
        row = session.get(OrderModel, order_id)
        return _to_domain(row) if row is not None else None

    def save(self, order: Order) -> Order:
        now = now_utc()
        row = OrderModel(
            user_id=order.user_id,
            order_date=order.order_date or now,
            status=order.status.value,
            total_amount=order.total_amount,
            shipping_address=order.shipping_address,
            version=1,
            created_at=now,
            updated_at=now,
            items=[
                OrderItemModel(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                    stock_reserved=item.stock_reserved,
                )
                for item in order.items
            ],
        )
        with db.session_scope(self.session_factory) as session:
            session.add(row)
            session.flush()
            stored = _to_domain(row)
        logger.debug("stored order id=%s items=%s", stored.id, len(stored.items))
        return stored

    def get(self, order_id: int) -> Order | None:
        with db.session_scope(self.session_factory) as session:
            return self._load(session, order_id)

    def list(self, filter: OrderFilter | None = None) -> list[Order]:
        stmt: Select[tuple[OrderModel]] = select(OrderModel).order_by(OrderModel.id.asc())
        if filter is not None and filter.user_id is not None:
            stmt = stmt.where(OrderModel.user_id == filter.user_id)
        if filter is not None and filter.status is not None:
            stmt = stmt.where(OrderModel.status == OrderStatus(filter.status).value)
        with db.session_scope(self.session_factory) as session:
            return [_to_domain(row) for row in session.scalars(stmt).all()]

    def update(self, order: Order) -> Order:
        if order.id is None:
            raise NotFoundError("order", None)

        # Version check: a concurrent writer that bumped the version first
        # makes this statement match zero rows.
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order.id, OrderModel.version == order.version)
            .values(status=order.status.value, version=order.version + 1, updated_at=now_utc())
            .execution_options(synchronize_session=False)
        )
        with db.session_scope(self.session_factory) as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                if session.get(OrderModel, order.id) is None:
                    raise NotFoundError("order", order.id)
                raise ConcurrentModificationError(order.id, order.version)
            stored = self._load(session, order.id)
        if stored is None:
            raise NotFoundError("order", order.id)
        return stored

    def exists_item_for_product(self, product_id: int) -> bool:
        stmt = select(exists().where(OrderItemModel.product_id == product_id))
        with db.session_scope(self.session_factory) as session:
            return bool(session.scalar(stmt))

    def mark_stock_reserved(self, order_id: int, item_ids: Iterable[int]) -> Order:
        ids = [item_id for item_id in item_ids if item_id is not None]
        with db.session_scope(self.session_factory) as session:
            if ids:
                session.execute(
                    update(OrderItemModel)
                    .where(OrderItemModel.order_id == order_id, OrderItemModel.id.in_(ids))
                    .values(stock_reserved=True)
                    .execution_options(synchronize_session=False)
                )
            stored = self._load(session, order_id)
        if stored is None:
            raise NotFoundError("order", order_id)
        return stored
