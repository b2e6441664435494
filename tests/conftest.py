from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import order_service.persistence.db as db
from order_service.clients.catalog import ProductSnapshot
from order_service.domain.errors import InsufficientStockError, NotFoundError, UpstreamUnavailableError
from order_service.persistence.models import Base
from order_service.persistence.store import SqlOrderStore
from order_service.services.orchestrator import OrderOrchestrator


class FakeMembership:
    def __init__(self, user_ids: set[int] | None = None):
        self.user_ids = set(user_ids or ())
        self.unavailable = False
        self.calls: list[int] = []

    def user_exists(self, user_id: int) -> bool:
        self.calls.append(user_id)
        if self.unavailable:
            raise UpstreamUnavailableError("membership")
        return user_id in self.user_ids


class FakeCatalog:
    def __init__(self):
        self.products: dict[int, ProductSnapshot] = {}
        self.unavailable = False
        self.failing_adjustments: set[int] = set()
        self.get_calls: list[int] = []
        self.adjust_calls: list[tuple[int, int]] = []

    def add(self, product_id: int, name: str, price: str, stock: int) -> None:
        self.products[product_id] = ProductSnapshot(id=product_id, name=name, price=Decimal(price), stock=stock)

    def stock_of(self, product_id: int) -> int:
        return self.products[product_id].stock

    def get_product(self, product_id: int) -> ProductSnapshot:
        self.get_calls.append(product_id)
        if self.unavailable:
            raise UpstreamUnavailableError("product_catalog")
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("product", product_id)
        return product

    def adjust_stock(self, product_id: int, delta: int) -> ProductSnapshot:
        self.adjust_calls.append((product_id, delta))
        if product_id in self.failing_adjustments:
            raise UpstreamUnavailableError("product_catalog")
        product = self.products[product_id]
        if product.stock + delta < 0:
            raise InsufficientStockError(product_id, product.stock, -delta)
        self.products[product_id] = replace(product, stock=product.stock + delta)
        return self.products[product_id]


class RecordingObserver:
    def __init__(self):
        self.created: list[int] = []
        self.changes: list[tuple[int, str, str]] = []

    def order_created(self, order) -> None:
        self.created.append(order.id)

    def status_changed(self, order, previous) -> None:
        self.changes.append((order.id, previous.value, order.status.value))


@pytest.fixture(autouse=True)
def configure_test_engine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'orders.sqlite'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", TestSessionLocal)

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def store() -> SqlOrderStore:
    return SqlOrderStore()


@pytest.fixture()
def membership() -> FakeMembership:
    return FakeMembership({1})


@pytest.fixture()
def catalog() -> FakeCatalog:
    fake = FakeCatalog()
    fake.add(1, "Keyboard", "20.00", 10)
    fake.add(2, "Mouse", "19.99", 5)
    return fake


@pytest.fixture()
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def orchestrator(store, membership, catalog, observer) -> OrderOrchestrator:
    return OrderOrchestrator(store=store, membership=membership, catalog=catalog, observer=observer)


@pytest.fixture()
def client(orchestrator):
    from order_service.api.deps import get_orchestrator
    from order_service.main import app

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
