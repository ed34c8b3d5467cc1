"""v1 routers."""
from . import orders, scheduled_orders

__all__ = ["orders", "scheduled_orders"]
