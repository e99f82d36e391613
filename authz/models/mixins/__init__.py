"""
Model mixins for SQLAlchemy models.
"""

from .timestamp_mixin import TimestampMixin

__all__ = ["TimestampMixin"]
