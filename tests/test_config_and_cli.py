from __future__ import annotations

import json
import logging
from decimal import Decimal

import pytest

from order_service.cli import main
from order_service.core.config import Settings
from order_service.core.logging import configure_logging
from order_service.domain.orders import Order, OrderItem


def test_default_database_rejected_outside_dev():
    with pytest.raises(ValueError):
        Settings(env="prod")
    settings = Settings(env="prod", database_url="postgresql+psycopg://orders@db/orders")
    assert settings.database_url.startswith("postgresql")


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG")
    configure_logging("DEBUG")
    named = [h for h in logging.getLogger().handlers if h.get_name() == "order_service"]
    assert len(named) == 1


def test_cli_lists_and_updates_orders(store, capsys):
    order = Order(
        user_id=3,
        shipping_address="1 Infinite Loop, Cupertino",
        items=(OrderItem(product_id=9, product_name="Cable", quantity=2, unit_price=Decimal("4.50")),),
    )
    order.recompute_totals()
    saved = store.save(order)

    assert main(["orders", "list", "--user-id", "3"]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert [o["id"] for o in listed] == [saved.id]
    assert listed[0]["total_amount"] == "9.00"

    assert main(["orders", "set-status", str(saved.id), "DELIVERED"]) == 0
    assert json.loads(capsys.readouterr().out)["status"] == "DELIVERED"

    assert main(["orders", "cancel", str(saved.id)]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "invalid_transition"

    assert main(["orders", "show", "404"]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "not_found"
