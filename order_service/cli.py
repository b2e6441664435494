from __future__ import annotations

import argparse
import json

from order_service.clients.catalog import HttpProductCatalogClient
from order_service.clients.membership import HttpMembershipClient
from order_service.core.config import get_settings
from order_service.core.logging import configure_logging
from order_service.domain.errors import OrderServiceError
from order_service.domain.orders.aggregates import Order, OrderStatus
from order_service.domain.orders.commands import OrderResponse
from order_service.persistence.db import init_db
from order_service.persistence.store import SqlOrderStore
from order_service.services.orchestrator import OrderOrchestrator

STATUS_CHOICES = [status.value for status in OrderStatus]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Order Service CLI")
    top = parser.add_subparsers(dest="command", required=True)

    top.add_parser("init-db", help="Create the order tables")

    orders = top.add_parser("orders", help="Order operations")
    orders_sub = orders.add_subparsers(dest="orders_command", required=True)

    list_cmd = orders_sub.add_parser("list", help="List orders")
    list_cmd.add_argument("--user-id", type=int, default=None)
    list_cmd.add_argument("--status", choices=STATUS_CHOICES, default=None)

    show = orders_sub.add_parser("show", help="Show one order")
    show.add_argument("order_id", type=int)

    set_status = orders_sub.add_parser("set-status", help="Change an order status")
    set_status.add_argument("order_id", type=int)
    set_status.add_argument("status", choices=STATUS_CHOICES)

    cancel = orders_sub.add_parser("cancel", help="Cancel an order")
    cancel.add_argument("order_id", type=int)

    return parser


def _orchestrator() -> OrderOrchestrator:
    settings = get_settings()
    return OrderOrchestrator(
        store=SqlOrderStore(),
        membership=HttpMembershipClient.from_settings(settings),
        catalog=HttpProductCatalogClient.from_settings(settings),
        settings=settings,
    )


def _dump(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _render(order: Order) -> dict:
    return OrderResponse.from_domain(order).model_dump(mode="json")


def _run_orders(args: argparse.Namespace) -> int:
    orchestrator = _orchestrator()

    if args.orders_command == "list":
        if args.user_id is not None:
            orders = orchestrator.list_by_user(args.user_id)
        elif args.status is not None:
            orders = orchestrator.list_by_status(OrderStatus(args.status))
        else:
            orders = orchestrator.list_orders()
        if args.user_id is not None and args.status is not None:
            orders = [order for order in orders if order.status == OrderStatus(args.status)]
        _dump([_render(order) for order in orders])
        return 0

    if args.orders_command == "show":
        _dump(_render(orchestrator.get_order(args.order_id)))
        return 0

    if args.orders_command == "set-status":
        _dump(_render(orchestrator.update_status(args.order_id, OrderStatus(args.status))))
        return 0

    if args.orders_command == "cancel":
        _dump(_render(orchestrator.cancel(args.order_id)))
        return 0

    return 2


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
        _dump({"status": "ok"})
        return 0

    if args.command == "orders":
        try:
            return _run_orders(args)
        except OrderServiceError as exc:
            _dump(exc.to_response())
            return 1

    parser.error("unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
