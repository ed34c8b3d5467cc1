from __future__ import annotations

from typing import Optional

from pydantic import Field

from freshcart.settings.base import FreshCartBaseSettings


class IntegrationsSettings(FreshCartBaseSettings):
    """
    External collaborators of the order engine.
    Loaded from .env file with exact variable name matching.
    """

    catalog_service_url: str = Field("http://localhost:8082", alias="CATALOG_SERVICE_URL")
    catalog_timeout_seconds: float = Field(5.0, gt=0, alias="CATALOG_TIMEOUT_SECONDS")

    # Redis streams are optional; events stay in-process when REDIS_URL is unset
    redis_url: Optional[str] = Field(None, alias="REDIS_URL")
    orders_stream: str = Field("freshcart:orders:stream", alias="ORDERS_STREAM")
    payments_stream: str = Field("freshcart:payments:stream", alias="PAYMENTS_STREAM")
    payments_consumer_group: str = Field(
        "freshcart:payments:consumers", alias="PAYMENTS_CONSUMER_GROUP"
    )
    payments_consumer_name: str = Field("order-service-1", alias="PAYMENTS_CONSUMER_NAME")
