from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from order_service.api.deps import get_orchestrator
from order_service.domain.orders.aggregates import OrderStatus
from order_service.domain.orders.commands import OrderResponse, PlaceOrderRequest, StatusUpdateRequest
from order_service.services.orchestrator import OrderOrchestrator

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.get("", response_model=list[OrderResponse])
def list_orders(orchestrator: OrderOrchestrator = Depends(get_orchestrator)):
    return [OrderResponse.from_domain(order) for order in orchestrator.list_orders()]


@router.get("/user/{user_id}", response_model=list[OrderResponse])
def list_orders_by_user(user_id: int, orchestrator: OrderOrchestrator = Depends(get_orchestrator)):
    return [OrderResponse.from_domain(order) for order in orchestrator.list_by_user(user_id)]


@router.get("/status/{status}", response_model=list[OrderResponse])
def list_orders_by_status(status: OrderStatus, orchestrator: OrderOrchestrator = Depends(get_orchestrator)):
    return [OrderResponse.from_domain(order) for order in orchestrator.list_by_status(status)]


@router.get("/product/{product_id}/exists")
def product_referenced(product_id: int, orchestrator: OrderOrchestrator = Depends(get_orchestrator)) -> bool:
    return orchestrator.is_product_referenced(product_id)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, orchestrator: OrderOrchestrator = Depends(get_orchestrator)):
    return OrderResponse.from_domain(orchestrator.get_order(order_id))


@router.post("", status_code=201, response_model=OrderResponse)
def create_order(
    req: PlaceOrderRequest,
    request: Request,
    response: Response,
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    order = orchestrator.create_order(req.user_id, req.shipping_address, req.to_lines())
    response.headers["Location"] = f"{str(request.url).rstrip('/')}/{order.id}"
    return OrderResponse.from_domain(order)


@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    req: StatusUpdateRequest,
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    return OrderResponse.from_domain(orchestrator.update_status(order_id, req.status))


@router.delete("/{order_id}", status_code=204)
def cancel_order(order_id: int, orchestrator: OrderOrchestrator = Depends(get_orchestrator)) -> Response:
    orchestrator.cancel(order_id)
    return Response(status_code=204)
