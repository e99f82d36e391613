"""
Timestamp mixin for created_at and updated_at fields.

The domain aggregates own their timestamps; rows copy them on save.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declared_attr


def _utcnow():
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for timestamp fields mirrored from an aggregate."""

    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    @declared_attr
    def updated_at(cls):
        return Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def copy_timestamps(self, aggregate) -> None:
        """Take created_at (first save only) and updated_at from the aggregate."""
        if self.created_at is None:
            self.created_at = aggregate.created_at
        self.updated_at = aggregate.updated_at
