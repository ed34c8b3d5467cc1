"""Infrastructure layer - database, adapters, message bus and logging."""
