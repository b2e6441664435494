from order_service.clients.catalog import HttpProductCatalogClient, ProductCatalogClient, ProductSnapshot
from order_service.clients.health import check_collaborators
from order_service.clients.membership import HttpMembershipClient, MembershipClient

__all__ = [
    "HttpMembershipClient",
    "HttpProductCatalogClient",
    "MembershipClient",
    "ProductCatalogClient",
    "ProductSnapshot",
    "check_collaborators",
]
