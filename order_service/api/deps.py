from __future__ import annotations

from fastapi import Depends

from order_service.clients.catalog import HttpProductCatalogClient
from order_service.clients.membership import HttpMembershipClient
from order_service.core.config import get_settings
from order_service.core.security import get_bearer_token
from order_service.persistence.store import SqlOrderStore
from order_service.services.orchestrator import OrderOrchestrator


def get_orchestrator(bearer_token: str | None = Depends(get_bearer_token)) -> OrderOrchestrator:
    settings = get_settings()
    return OrderOrchestrator(
        store=SqlOrderStore(),
        membership=HttpMembershipClient.from_settings(settings, bearer_token=bearer_token),
        catalog=HttpProductCatalogClient.from_settings(settings, bearer_token=bearer_token),
        settings=settings,
    )
