"""
RolePermission junction table for many-to-many role-permission relationships.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String, ForeignKey, UniqueConstraint, Index

from authz.models.base import BaseModel


class RolePermission(BaseModel):
    """Junction table for role-permission many-to-many relationships."""

    __tablename__ = "role_permissions"

    __table_args__ = (
        # Unique constraint to prevent duplicate role-permission assignments
        UniqueConstraint('role_id', 'permission_id', name='unique_role_permission'),
        # Composite index for permission-based role lookups
        Index('idx_role_permission_perm_role', 'permission_id', 'role_id'),
    )

    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(String(36), ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<RolePermission(role_id='{self.role_id}', permission_id='{self.permission_id}')>"
