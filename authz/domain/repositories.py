"""
Repository interfaces consumed by the permission engine.

Every method is a coroutine: the repository call is the only point where an
evaluation suspends, and cancelling the awaiting task cancels the call.
Lookups of missing rows raise DomainError with the matching *_NOT_FOUND kind.
"""

from abc import ABC, abstractmethod
from typing import List

from authz.domain.permission import Permission
from authz.domain.policy import Policy
from authz.domain.role import Role
from authz.domain.valueobjects import PermissionID, PolicyID, RoleID


class PermissionRepository(ABC):

    @abstractmethod
    async def save(self, permission: Permission) -> None: ...

    @abstractmethod
    async def find_by_id(self, permission_id: PermissionID) -> Permission: ...

    @abstractmethod
    async def find_by_resource_and_action(self, resource: str, action: str) -> Permission: ...

    @abstractmethod
    async def find_all(self) -> List[Permission]: ...

    @abstractmethod
    async def delete(self, permission_id: PermissionID) -> None: ...


class RoleRepository(ABC):

    @abstractmethod
    async def save(self, role: Role) -> None: ...

    @abstractmethod
    async def find_by_id(self, role_id: RoleID) -> Role: ...

    @abstractmethod
    async def find_by_name(self, name: str) -> Role: ...

    @abstractmethod
    async def find_all(self) -> List[Role]: ...

    @abstractmethod
    async def delete(self, role_id: RoleID) -> None: ...

    @abstractmethod
    async def add_permission_to_role(self, role_id: RoleID, permission_id: PermissionID) -> None: ...

    @abstractmethod
    async def remove_permission_from_role(self, role_id: RoleID, permission_id: PermissionID) -> None: ...

    @abstractmethod
    async def find_permissions_by_role(self, role_id: RoleID) -> List[Permission]: ...


class PolicyRepository(ABC):

    @abstractmethod
    async def save(self, policy: Policy) -> None: ...

    @abstractmethod
    async def find_by_id(self, policy_id: PolicyID) -> Policy: ...

    @abstractmethod
    async def find_by_resource_and_action(self, resource: str, action: str) -> List[Policy]:
        """All policies (active or not) registered for exactly this pair."""

    @abstractmethod
    async def find_all_active(self) -> List[Policy]: ...

    @abstractmethod
    async def delete(self, policy_id: PolicyID) -> None: ...

    @abstractmethod
    async def count_by_resource(self, resource: str) -> int: ...


class UserRoleRepository(ABC):

    @abstractmethod
    async def assign_role(self, user_id: str, role_id: RoleID) -> None: ...

    @abstractmethod
    async def revoke_role(self, user_id: str, role_id: RoleID) -> None: ...

    @abstractmethod
    async def find_roles_by_user(self, user_id: str) -> List[Role]:
        """Roles held by the user, in stable assignment order."""

    @abstractmethod
    async def find_users_by_role(self, role_id: RoleID) -> List[str]: ...

    @abstractmethod
    async def has_role(self, user_id: str, role_id: RoleID) -> bool: ...
