"""
Role table.
"""

from sqlalchemy import Boolean, Column, String, Text

from authz.models.base import StringIDBaseModel
from authz.models.mixins import TimestampMixin


class RoleModel(StringIDBaseModel, TimestampMixin):
    """Persisted role."""

    __tablename__ = "roles"

    name = Column(String(100), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    is_system = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<RoleModel(id='{self.id}', name='{self.name}')>"
