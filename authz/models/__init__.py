"""
SQLAlchemy database models.
"""

from authz.models.base import Base
from authz.models.permission import PermissionModel
from authz.models.role import RoleModel
from authz.models.role_permission import RolePermission
from authz.models.user_role import UserRole
from authz.models.policy import PolicyModel

__all__ = [
    "Base", "PermissionModel", "RoleModel", "RolePermission", "UserRole", "PolicyModel"
]
