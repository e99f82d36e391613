"""
Policy aggregate: an attribute-based rule for one resource/action pair.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from authz.core.errors import DomainError, ErrorKind
from authz.domain.permission import utcnow
from authz.domain.valueobjects import ActionType, PolicyEffect, PolicyID, ResourceType

# Conditions are kept as stored: a mapping, or raw text when the store could not decode it.
RawConditions = Union[Mapping[str, Any], str]


class Policy:
    """
    ABAC policy.

    ``conditions`` maps attribute keys to expected values; it is decoded and
    checked by the condition evaluator, not by the policy itself.
    Higher ``priority`` is evaluated first.
    """

    def __init__(
        self,
        id: PolicyID,
        name: str,
        resource: str,
        action: str,
        effect,
        conditions: Optional[RawConditions] = None,
        priority: int = 0,
        description: str = "",
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        if not id:
            raise DomainError(ErrorKind.INVALID_POLICY, "policy id is required")
        if not name:
            raise DomainError(ErrorKind.INVALID_POLICY, "policy name is required")
        try:
            self._resource = ResourceType(resource)
            self._action = ActionType(action)
        except DomainError as e:
            raise DomainError(ErrorKind.INVALID_POLICY, e.message, e.details) from e
        self._id = str(id)
        self.name = name
        self.description = description or ""
        self.effect = PolicyEffect.parse(effect)
        self.conditions = conditions if conditions is not None else {}
        self.priority = _validate_priority(priority)
        self.is_active = bool(is_active)
        now = utcnow()
        self.created_at = created_at or now
        self.updated_at = updated_at or self.created_at

    @property
    def id(self) -> PolicyID:
        return self._id

    @property
    def resource(self) -> ResourceType:
        return self._resource

    @property
    def action(self) -> ActionType:
        return self._action

    def matches(self, resource: str, action: str) -> bool:
        """Coarse filter: active and for exactly this resource and action."""
        return self.is_active and self._resource == resource and self._action == action

    def update_policy(
        self,
        name: str,
        description: str,
        effect,
        conditions: RawConditions,
        priority: int,
    ) -> None:
        if not name:
            raise DomainError(ErrorKind.INVALID_POLICY, "policy name is required")
        self.effect = PolicyEffect.parse(effect)
        self.priority = _validate_priority(priority)
        self.name = name
        self.description = description
        self.conditions = conditions if conditions is not None else {}
        self.updated_at = utcnow()

    def activate(self) -> None:
        self.is_active = True
        self.updated_at = utcnow()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self.name,
            "description": self.description,
            "resource": str(self._resource),
            "action": str(self._action),
            "effect": self.effect.value,
            "conditions": self.conditions,
            "priority": self.priority,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return (
            f"<Policy(id='{self._id}', name='{self.name}', effect='{self.effect.value}', "
            f"priority={self.priority}, is_active={self.is_active})>"
        )


def _validate_priority(priority) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise DomainError(
            ErrorKind.INVALID_POLICY, f"policy priority must be an integer, got {priority!r}"
        )
    return priority
