# Settings package
from freshcart.settings.modules import (
    AppSettings,
    CarbonSettings,
    DatabaseSettings,
    IntegrationsSettings,
    PricingSettings,
    SchedulerSettings,
    get_app_settings,
)

__all__ = [
    "get_app_settings",
    "AppSettings",
    "CarbonSettings",
    "DatabaseSettings",
    "IntegrationsSettings",
    "PricingSettings",
    "SchedulerSettings",
]
