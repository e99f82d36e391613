"""
Permission domain service.

Orchestrates role assignment/revocation and access decisions over the
repository interfaces. Business failures are raised as DomainError; repository
failures propagate unchanged.
"""

import logging
from typing import Any, Dict, List, Optional

from authz.core.errors import DomainError, ErrorKind
from authz.domain.evaluation import EvaluationContext, EvaluationResult
from authz.domain.evaluator import PermissionEvaluator
from authz.domain.permission import Permission
from authz.domain.repositories import (
    PermissionRepository,
    PolicyRepository,
    RoleRepository,
    UserRoleRepository,
)
from authz.domain.role import Role
from authz.domain.valueobjects import RoleID

logger = logging.getLogger(__name__)


class PermissionDomainService:
    """Entry point for permission checks and user-role management."""

    def __init__(
        self,
        permission_repo: PermissionRepository,
        role_repo: RoleRepository,
        policy_repo: PolicyRepository,
        user_role_repo: UserRoleRepository,
        evaluator: Optional[PermissionEvaluator] = None,
    ):
        self.permission_repo = permission_repo
        self.role_repo = role_repo
        self.policy_repo = policy_repo
        self.user_role_repo = user_role_repo
        self.evaluator = evaluator or PermissionEvaluator(role_repo, policy_repo)

    async def build_context(
        self,
        user_id: str,
        resource: str,
        action: str,
        resource_ctx: Optional[Dict[str, Any]] = None,
        environment: Optional[Dict[str, Any]] = None,
    ) -> EvaluationContext:
        """Assemble an evaluation context, resolving the user's roles from the store."""
        roles = await self.user_role_repo.find_roles_by_user(user_id)
        return EvaluationContext(
            user_id=user_id,
            user_roles=[role.id for role in roles],
            resource=resource,
            action=action,
            resource_ctx=dict(resource_ctx or {}),
            environment=dict(environment or {}),
        )

    async def evaluate(
        self,
        user_id: str,
        resource: str,
        action: str,
        resource_ctx: Optional[Dict[str, Any]] = None,
        environment: Optional[Dict[str, Any]] = None,
    ) -> EvaluationResult:
        """Full decision including reason, matched rule and policy trace."""
        ctx = await self.build_context(user_id, resource, action, resource_ctx, environment)
        return await self.evaluator.evaluate(ctx)

    async def can_user_perform_action(
        self,
        user_id: str,
        resource: str,
        action: str,
        resource_ctx: Optional[Dict[str, Any]] = None,
        environment: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Check whether a user may perform an action on a resource.

        Args:
            user_id: The subject's ID
            resource: Resource type (e.g., "task")
            action: Action name (e.g., "update")
            resource_ctx: Attributes of the concrete resource (e.g., {"owner_id": "u1"})
            environment: Request-level attributes (e.g., {"ip": "10.0.0.1"})

        Returns:
            True if allowed, False otherwise
        """
        result = await self.evaluate(user_id, resource, action, resource_ctx, environment)
        return result.allowed

    async def _get_role(self, role_id: RoleID) -> Role:
        role = await self.role_repo.find_by_id(role_id)
        if role is None:
            raise DomainError(ErrorKind.ROLE_NOT_FOUND).with_details("role_id", role_id)
        return role

    async def assign_role_to_user(self, user_id: str, role_id: RoleID) -> None:
        """
        Assign a role to a user.

        Raises:
            DomainError: ROLE_NOT_FOUND, ROLE_ALREADY_ASSIGNED, or
                SYSTEM_ROLE_IMMUTABLE (system roles are never assignable here)
        """
        role = await self._get_role(role_id)

        if await self.user_role_repo.has_role(user_id, role_id):
            raise DomainError(
                ErrorKind.ROLE_ALREADY_ASSIGNED, "user already has this role"
            ).with_details("user_id", user_id).with_details("role_id", role_id)

        if role.is_system:
            raise DomainError(
                ErrorKind.SYSTEM_ROLE_IMMUTABLE, "cannot assign system role to user"
            ).with_details("role_id", role_id)

        await self.user_role_repo.assign_role(user_id, role_id)
        logger.info(f"Role {role_id} assigned to user {user_id}")

    async def revoke_role_from_user(self, user_id: str, role_id: RoleID) -> None:
        """
        Revoke a role from a user.

        Raises:
            DomainError: ROLE_NOT_FOUND, ROLE_NOT_ASSIGNED, or SYSTEM_ROLE_IMMUTABLE
        """
        role = await self._get_role(role_id)

        if not await self.user_role_repo.has_role(user_id, role_id):
            raise DomainError(
                ErrorKind.ROLE_NOT_ASSIGNED, "user does not have this role"
            ).with_details("user_id", user_id).with_details("role_id", role_id)

        if role.is_system:
            raise DomainError(
                ErrorKind.SYSTEM_ROLE_IMMUTABLE, "cannot revoke system role from user"
            ).with_details("role_id", role_id)

        await self.user_role_repo.revoke_role(user_id, role_id)
        logger.info(f"Role {role_id} revoked from user {user_id}")

    async def get_user_permissions(self, user_id: str) -> List[Permission]:
        """
        Union of the permissions granted by all of the user's roles.

        A permission reachable through several roles is returned once, in
        first-seen order.
        """
        roles = await self.user_role_repo.find_roles_by_user(user_id)

        permissions: Dict[str, Permission] = {}
        for role in roles:
            for permission in await self.role_repo.find_permissions_by_role(role.id):
                permissions.setdefault(permission.id, permission)

        return list(permissions.values())

    async def get_user_roles(self, user_id: str) -> List[Role]:
        return await self.user_role_repo.find_roles_by_user(user_id)

    async def has_role_named(self, user_id: str, role_name: str) -> bool:
        """Check if a user holds a role with the given name."""
        roles = await self.user_role_repo.find_roles_by_user(user_id)
        result = any(role.name == role_name for role in roles)

        if result:
            logger.debug(f"User {user_id} has role '{role_name}'")
        else:
            logger.debug(f"User {user_id} does NOT have role '{role_name}'")

        return result
