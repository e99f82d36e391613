"""
Base SQLAlchemy models with common fields and utilities.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import declared_attr

from authz.core.database import Base


class BaseModel(Base):
    """Base model with an integer surrogate key (junction tables)."""

    __abstract__ = True

    @declared_attr
    def id(cls):
        return Column(Integer, primary_key=True, index=True, autoincrement=True)

    def to_dict(self):
        """Convert model to dictionary."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class StringIDBaseModel(Base):
    """Base model keyed by an application-assigned string id (e.g. 'role-admin')."""

    __abstract__ = True

    @declared_attr
    def id(cls):
        return Column(String(36), primary_key=True, index=True)

    def to_dict(self):
        """Convert model to dictionary."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}
