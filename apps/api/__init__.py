"""FreshCart REST API."""
