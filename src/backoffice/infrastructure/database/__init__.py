"""Database infrastructure - shared engine and session primitives."""

from infrastructure.database.models import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
