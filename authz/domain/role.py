"""
Role aggregate: a named bundle of permission ids.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from authz.core.errors import DomainError, ErrorKind
from authz.domain.permission import utcnow
from authz.domain.valueobjects import PermissionID, RoleID


class Role:
    """
    A role groups permission ids.

    System roles are protected: their descriptive fields and existing grants
    cannot be changed. New permissions may still be added to any role.
    """

    def __init__(
        self,
        id: RoleID,
        name: str,
        display_name: str = "",
        description: str = "",
        is_system: bool = False,
        permissions: Optional[Iterable[PermissionID]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        if not id:
            raise DomainError(ErrorKind.INVALID_ROLE, "role id is required")
        if not name:
            raise DomainError(ErrorKind.INVALID_ROLE, "role name is required")
        self._id = str(id)
        self.name = name
        self.display_name = display_name or name
        self.description = description or ""
        self.is_system = bool(is_system)
        self._permissions: List[PermissionID] = []
        for permission_id in permissions or ():
            if permission_id not in self._permissions:
                self._permissions.append(permission_id)
        now = utcnow()
        self.created_at = created_at or now
        self.updated_at = updated_at or self.created_at

    @property
    def id(self) -> RoleID:
        return self._id

    @property
    def permissions(self) -> List[PermissionID]:
        """Copy of the granted permission ids."""
        return list(self._permissions)

    def has_permission(self, permission_id: PermissionID) -> bool:
        return permission_id in self._permissions

    def add_permission(self, permission_id: PermissionID) -> None:
        """
        Grant a permission to this role.

        Raises:
            DomainError: INVALID_ROLE if the permission is already granted
        """
        if permission_id in self._permissions:
            raise DomainError(
                ErrorKind.INVALID_ROLE,
                f"permission {permission_id} already exists in role {self._id}",
                {"code": "PERMISSION_ALREADY_EXISTS", "permission_id": permission_id},
            )
        self._permissions.append(permission_id)
        self.updated_at = utcnow()

    def remove_permission(self, permission_id: PermissionID) -> None:
        """
        Revoke a permission from this role.

        Raises:
            DomainError: SYSTEM_ROLE_IMMUTABLE for system roles,
                PERMISSION_NOT_FOUND if the permission is not granted
        """
        if self.is_system:
            raise DomainError(
                ErrorKind.SYSTEM_ROLE_IMMUTABLE,
                "system role permissions cannot be removed",
            ).with_details("role_id", self._id)
        if permission_id not in self._permissions:
            raise DomainError(
                ErrorKind.PERMISSION_NOT_FOUND,
                f"permission {permission_id} not granted to role {self._id}",
            ).with_details("permission_id", permission_id)
        self._permissions.remove(permission_id)
        self.updated_at = utcnow()

    def update_info(self, display_name: str, description: str) -> None:
        if self.is_system:
            raise DomainError(
                ErrorKind.SYSTEM_ROLE_IMMUTABLE,
                "system role cannot be modified",
            ).with_details("role_id", self._id)
        self.display_name = display_name
        self.description = description
        self.updated_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "is_system": self.is_system,
            "permissions": self.permissions,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return f"<Role(id='{self._id}', name='{self.name}', is_system={self.is_system})>"
