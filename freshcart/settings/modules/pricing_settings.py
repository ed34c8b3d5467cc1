from __future__ import annotations

from decimal import Decimal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from freshcart.domain.services.pricing import PricingCalculator
from freshcart.settings.base import FreshCartBaseSettings


class PricingSettings(FreshCartBaseSettings):
    """
    Order pricing rules.
    Loaded from ``PRICING_*`` environment variables.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PRICING_", extra="ignore")

    tax_rate: Decimal = Field(Decimal("0.061"), ge=0)
    delivery_fee: Decimal = Field(Decimal("10.00"), ge=0)
    free_delivery_threshold: Decimal = Field(Decimal("100.00"), ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)

    def build_calculator(self) -> PricingCalculator:
        return PricingCalculator(
            tax_rate=self.tax_rate,
            delivery_fee=self.delivery_fee,
            free_delivery_threshold=self.free_delivery_threshold,
            currency=self.currency,
        )
