"""FastAPI application main entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.api import deps
from apps.api.v1.endpoints import orders, scheduled_orders
from freshcart.application.services import PAYMENT_SUCCEEDED_TOPIC, PaymentSettlementHandler
from freshcart.domain.exceptions import (
    AccessDeniedError,
    NotFoundError,
    PolicyViolationError,
)
from freshcart.infrastructure.bus import RedisStreamConsumer
from freshcart.infrastructure.database.config import close_database, get_engine, init_database
from freshcart.settings import get_app_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables, wire the payment handler and run background workers."""
    settings = get_app_settings()
    await init_database(get_engine())

    order_service = deps.get_order_service(
        deps.get_session_factory(), deps.get_catalog_client(), deps.get_event_publisher()
    )
    bus = deps.get_event_bus()
    bus.subscribe(PAYMENT_SUCCEEDED_TOPIC, PaymentSettlementHandler(order_service))

    scheduler = None
    if settings.scheduler.enabled:
        scheduler = deps.build_scheduler(order_service)
        scheduler.start()

    consumer: Optional[RedisStreamConsumer] = None
    consumer_task: Optional[asyncio.Task] = None
    integrations = settings.integrations
    if integrations.redis_url:
        consumer = RedisStreamConsumer(
            redis_url=integrations.redis_url,
            stream_name=integrations.payments_stream,
            consumer_group=integrations.payments_consumer_group,
            consumer_name=integrations.payments_consumer_name,
        )
        consumer_task = asyncio.create_task(consumer.run(bus))

    try:
        yield
    finally:
        if consumer is not None:
            consumer.stop()
            consumer_task.cancel()
            try:
                await consumer_task
            except asyncio.CancelledError:
                pass
            await consumer.disconnect()
        if scheduler is not None:
            await scheduler.stop()
        await deps.close_event_publisher()
        await close_database()


app = FastAPI(
    title="FreshCart Fulfillment API",
    description="Order fulfillment and scheduled-order API",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(orders.router, prefix="/api/v1")
app.include_router(scheduled_orders.router, prefix="/api/v1")


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle ValueError exceptions (domain ValidationError included).

    Args:
        request: FastAPI request
        exc: ValueError exception

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(PolicyViolationError)
async def policy_violation_handler(request: Request, exc: PolicyViolationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions.

    Args:
        request: FastAPI request
        exc: Exception

    Returns:
        JSONResponse with error details
    """
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
