"""
Permission table.
"""

from sqlalchemy import Column, String, Text, UniqueConstraint, Index

from authz.models.base import StringIDBaseModel
from authz.models.mixins import TimestampMixin


class PermissionModel(StringIDBaseModel, TimestampMixin):
    """Persisted permission (one resource:action capability)."""

    __tablename__ = "permissions"

    # Unique constraint and composite index for resource:action lookups
    __table_args__ = (
        UniqueConstraint('resource', 'action', name='unique_resource_action'),
        Index('idx_permission_resource_action', 'resource', 'action'),
    )

    name = Column(String(100), nullable=False)
    resource = Column(String(50), index=True, nullable=False)
    action = Column(String(50), index=True, nullable=False)
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<PermissionModel(id='{self.id}', resource='{self.resource}', action='{self.action}')>"
