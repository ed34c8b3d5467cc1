from __future__ import annotations

from decimal import Decimal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from freshcart.domain.enums import PackagingType
from freshcart.domain.services.carbon import (
    DEFAULT_EMISSION_FACTORS,
    DEFAULT_PACKAGING_FACTORS,
    EmissionConfig,
)
from freshcart.settings.base import FreshCartBaseSettings


class CarbonSettings(FreshCartBaseSettings):
    """
    Carbon model tunables.
    Loaded from ``CARBON_*`` environment variables. Category and packaging
    factors default to the built-in tables and may be overridden as JSON.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARBON_", extra="ignore")

    delivery_factor_per_km: Decimal = Field(Decimal("0.2"), ge=0)
    default_distance_km: Decimal = Field(Decimal("5.0"), ge=0)
    default_item_weight_kg: Decimal = Field(Decimal("0.5"), gt=0)
    default_packaging: PackagingType = PackagingType.STANDARD
    baseline_per_order_kg: Decimal = Field(Decimal("15.0"), ge=0)

    category_factors: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_EMISSION_FACTORS)
    )
    packaging_factors: dict[PackagingType, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_PACKAGING_FACTORS)
    )

    def build_emission_config(self) -> EmissionConfig:
        category_factors = dict(DEFAULT_EMISSION_FACTORS)
        category_factors.update(self.category_factors)
        packaging_factors = dict(DEFAULT_PACKAGING_FACTORS)
        packaging_factors.update(self.packaging_factors)

        return EmissionConfig(
            category_factors=category_factors,
            packaging_factors=packaging_factors,
            delivery_factor_per_km=self.delivery_factor_per_km,
            default_distance_km=self.default_distance_km,
            default_item_weight_kg=self.default_item_weight_kg,
            default_packaging=self.default_packaging,
        )
