"""
HTTP Catalog Client Implementation.

Decrements product stock through the catalog service REST API.
"""
from typing import Optional
import logging
import aiohttp

from freshcart.application.interfaces import ICatalogClient
from freshcart.settings.modules.integrations_settings import IntegrationsSettings


logger = logging.getLogger(__name__)


class HttpCatalogClient(ICatalogClient):
    """
    aiohttp implementation of the catalog stock client.

    ``PUT {base_url}/api/catalog/products/{id}/stock?quantity=N``.
    Every failure is logged and swallowed.
    """

    def __init__(
        self,
        settings: Optional[IntegrationsSettings] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize catalog client.

        Args:
            settings: Integration settings with the catalog URL
            base_url: Overrides the settings URL
            timeout_seconds: Overrides the settings timeout
        """
        settings = settings or IntegrationsSettings()
        self.base_url = (base_url or settings.catalog_service_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or settings.catalog_timeout_seconds
        )
        logger.info(f"HttpCatalogClient initialized ({self.base_url})")

    def stock_url(self, product_id: int) -> str:
        return f"{self.base_url}/api/catalog/products/{product_id}/stock"

    async def decrement_stock(self, product_id: int, quantity: int) -> None:
        """
        Take ``quantity`` units of a product out of stock.

        Args:
            product_id: Catalog product id
            quantity: Units to remove
        """
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.put(
                    self.stock_url(product_id), params={"quantity": str(quantity)}
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        logger.error(
                            f"Catalog API error for product {product_id}: "
                            f"{response.status} - {error_text}"
                        )
                    else:
                        logger.info(f"Stock decremented: product {product_id} by {quantity}")
        except Exception as e:
            logger.error(
                f"Failed to decrement stock for product {product_id}: {e}", exc_info=True
            )
