# Settings modules
from .app_settings import AppSettings, get_app_settings
from .carbon_settings import CarbonSettings
from .database_settings import DatabaseSettings
from .integrations_settings import IntegrationsSettings
from .pricing_settings import PricingSettings
from .scheduler_settings import SchedulerSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "CarbonSettings",
    "DatabaseSettings",
    "IntegrationsSettings",
    "PricingSettings",
    "SchedulerSettings",
]
