"""
Permission aggregate: a capability on one resource/action pair.
"""

from datetime import datetime, timezone
from typing import Optional

from authz.core.errors import DomainError, ErrorKind
from authz.domain.valueobjects import ActionType, PermissionID, ResourceType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Permission:
    """
    A permission grants one action on one resource type.

    Identity is the permission id; apart from the description a permission
    never changes after construction.
    """

    def __init__(
        self,
        id: PermissionID,
        name: str,
        resource: str,
        action: str,
        description: str = "",
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        if not id:
            raise DomainError(ErrorKind.INVALID_PERMISSION, "permission id is required")
        self._id = str(id)
        self._name = name or f"{resource}:{action}"
        self._resource = ResourceType(resource)
        self._action = ActionType(action)
        self.description = description or ""
        now = utcnow()
        self.created_at = created_at or now
        self.updated_at = updated_at or self.created_at

    @property
    def id(self) -> PermissionID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def resource(self) -> ResourceType:
        return self._resource

    @property
    def action(self) -> ActionType:
        return self._action

    @property
    def permission_string(self) -> str:
        """Return permission as resource:action format."""
        return f"{self._resource}:{self._action}"

    def matches(self, resource: str, action: str) -> bool:
        """True iff this permission is for exactly this resource and action."""
        return self._resource == resource and self._action == action

    def update_description(self, description: str) -> None:
        self.description = description
        self.updated_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self._name,
            "resource": str(self._resource),
            "action": str(self._action),
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other):
        if not isinstance(other, Permission):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)

    def __repr__(self):
        return f"<Permission(id='{self._id}', resource='{self._resource}', action='{self._action}')>"
