from __future__ import annotations

import logging

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.api.routes_orders import router as orders_router
from order_service.clients import HttpMembershipClient, HttpProductCatalogClient, check_collaborators
from order_service.core.config import get_settings
from order_service.core.logging import configure_logging
from order_service.domain.errors import OrderServiceError, ValidationError
from order_service.persistence.db import init_db

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

ERROR_STATUS_CODES: dict[str, int] = {
    "validation_error": 400,
    "not_found": 404,
    "insufficient_stock": 409,
    "invalid_transition": 409,
    "concurrent_modification": 409,
    "stock_adjustment_incomplete": 502,
    "stock_reservation_unrecorded": 500,
    "upstream_unavailable": 503,
}

app = FastAPI(title=settings.app_name)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("order service ready: env=%s", settings.env)


@app.exception_handler(OrderServiceError)
async def order_service_error_handler(_: Request, exc: OrderServiceError):
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.code, 500),
        content=exc.to_response(),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in {"body", "path", "query"})
        message = str(error.get("msg", "invalid value"))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    error = ValidationError(_describe_validation_errors(exc))
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[error.code],
        content=error.to_response(),
    )


@app.get("/healthz")
def healthz(deep: bool = Query(default=False)) -> dict:
    if not deep:
        return {"status": "ok"}
    collaborators = check_collaborators(
        HttpMembershipClient.from_settings(settings),
        HttpProductCatalogClient.from_settings(settings),
    )
    healthy = all(value == "UP" for value in collaborators.values())
    return {"status": "ok" if healthy else "degraded", "collaborators": collaborators}


app.include_router(orders_router)
