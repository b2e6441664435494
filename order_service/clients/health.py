from __future__ import annotations

from order_service.clients.catalog import ProductCatalogClient
from order_service.clients.membership import MembershipClient
from order_service.domain.errors import NotFoundError, UpstreamUnavailableError

# Probe with an id that is never issued so the calls stay read-only.
PROBE_ID = 2**63 - 1


def check_collaborators(membership: MembershipClient, catalog: ProductCatalogClient) -> dict[str, str]:
    status: dict[str, str] = {}

    try:
        membership.user_exists(PROBE_ID)
        status["membership"] = "UP"
    except UpstreamUnavailableError:
        status["membership"] = "DOWN"

    try:
        catalog.get_product(PROBE_ID)
        status["product_catalog"] = "UP"
    except NotFoundError:
        status["product_catalog"] = "UP"
    except UpstreamUnavailableError:
        status["product_catalog"] = "DOWN"

    return status
