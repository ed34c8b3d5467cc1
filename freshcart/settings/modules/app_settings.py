from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from freshcart.settings.modules.carbon_settings import CarbonSettings
from freshcart.settings.modules.database_settings import DatabaseSettings
from freshcart.settings.modules.integrations_settings import IntegrationsSettings
from freshcart.settings.modules.pricing_settings import PricingSettings
from freshcart.settings.modules.scheduler_settings import SchedulerSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    app_name: str = "FreshCart Fulfillment API"
    database: DatabaseSettings
    pricing: PricingSettings
    carbon: CarbonSettings
    scheduler: SchedulerSettings
    integrations: IntegrationsSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings(
        database=DatabaseSettings(),
        pricing=PricingSettings(),
        carbon=CarbonSettings(),
        scheduler=SchedulerSettings(),
        integrations=IntegrationsSettings(),
    )
