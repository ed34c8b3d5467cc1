from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from freshcart.settings.base import FreshCartBaseSettings


class SchedulerSettings(FreshCartBaseSettings):
    """
    Scheduled-order sweep settings.
    Loaded from ``SCHEDULER_*`` environment variables.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SCHEDULER_", extra="ignore")

    enabled: bool = True
    interval_seconds: float = Field(3600.0, gt=0)
    claim_ttl_seconds: float = Field(900.0, gt=0)
