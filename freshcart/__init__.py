"""FreshCart order fulfillment and scheduled-order engine."""

__version__ = "0.1.0"
