"""Data layer - ORM models, mappers, repositories and unit of work."""

from .models import Base
from .uow import UnitOfWork, create_uow

__all__ = ["Base", "UnitOfWork", "create_uow"]
