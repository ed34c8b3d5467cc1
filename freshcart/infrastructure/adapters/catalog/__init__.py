"""Catalog service adapters."""
from .http_catalog_client import HttpCatalogClient

__all__ = ["HttpCatalogClient"]
