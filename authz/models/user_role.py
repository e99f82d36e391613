"""
UserRole junction table for many-to-many user-role relationships.

Users live outside this engine, so user_id is a plain string with no foreign key.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String, ForeignKey, UniqueConstraint, Index

from authz.models.base import BaseModel


class UserRole(BaseModel):
    """Junction table for user-role many-to-many relationships."""

    __tablename__ = "user_roles"

    __table_args__ = (
        # Unique constraint to prevent duplicate user-role assignments
        UniqueConstraint('user_id', 'role_id', name='unique_user_role'),
        # Composite index for role-based user lookups
        Index('idx_user_role_role_user', 'role_id', 'user_id'),
    )

    user_id = Column(String(36), nullable=False, index=True)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<UserRole(user_id='{self.user_id}', role_id='{self.role_id}')>"
