"""
Domain errors.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""


class FulfillmentError(Exception):
    """Base class for errors reported to callers."""


class ValidationError(FulfillmentError, ValueError):
    """Request is missing data or carries invalid values."""


class NotFoundError(FulfillmentError):
    """Entity does not exist or is not visible to the caller."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class PolicyViolationError(FulfillmentError):
    """Operation is not allowed in the entity's current state."""


class AccessDeniedError(FulfillmentError):
    """Caller lacks the role required for the operation."""


class ConcurrentModificationError(PolicyViolationError):
    """Entity changed since it was loaded; reload and retry."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} was modified concurrently")
