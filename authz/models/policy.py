"""
ABAC policy table.
"""

from sqlalchemy import Boolean, Column, Integer, String, Text, Index

from authz.models.base import StringIDBaseModel
from authz.models.mixins import TimestampMixin


class PolicyModel(StringIDBaseModel, TimestampMixin):
    """Persisted ABAC policy; conditions are stored as JSON text."""

    __tablename__ = "permission_policies"

    __table_args__ = (
        Index('idx_policy_resource_action', 'resource_type', 'action'),
        Index('idx_policy_priority', 'priority'),
        Index('idx_policy_active', 'is_active'),
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    resource_type = Column(String(50), nullable=False)
    action = Column(String(50), nullable=False)
    effect = Column(String(10), nullable=False)
    conditions = Column(Text, nullable=False, default="{}")
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<PolicyModel(id='{self.id}', name='{self.name}', priority={self.priority})>"
