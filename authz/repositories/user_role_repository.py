"""
SQLAlchemy implementation of UserRoleRepository.
"""

from typing import List

from authz.core.errors import DomainError, ErrorKind
from authz.domain.repositories import UserRoleRepository
from authz.domain.role import Role
from authz.models.role import RoleModel
from authz.models.user_role import UserRole
from authz.repositories.base import SQLAlchemyRepository
from authz.repositories.role_repository import role_to_aggregate


class SQLAlchemyUserRoleRepository(SQLAlchemyRepository, UserRoleRepository):

    def _exists(self, user_id: str, role_id: str) -> bool:
        return self.db.query(UserRole.id).filter(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id
        ).first() is not None

    async def assign_role(self, user_id: str, role_id: str) -> None:
        with self._transaction() as db:
            if self._exists(user_id, role_id):
                raise DomainError(
                    ErrorKind.ROLE_ALREADY_ASSIGNED, "role already assigned to user"
                ).with_details("user_id", user_id).with_details("role_id", role_id)
            db.add(UserRole(user_id=user_id, role_id=role_id))

    async def revoke_role(self, user_id: str, role_id: str) -> None:
        with self._transaction() as db:
            deleted = db.query(UserRole).filter(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id
            ).delete()
            if deleted == 0:
                raise DomainError(
                    ErrorKind.ROLE_NOT_ASSIGNED, "role not assigned to user"
                ).with_details("user_id", user_id).with_details("role_id", role_id)

    async def find_roles_by_user(self, user_id: str) -> List[Role]:
        # Single JOIN query, assignment order
        models = self.db.query(RoleModel).join(
            UserRole, RoleModel.id == UserRole.role_id
        ).filter(
            UserRole.user_id == user_id
        ).order_by(UserRole.assigned_at, UserRole.id).all()

        return [role_to_aggregate(self.db, model) for model in models]

    async def find_users_by_role(self, role_id: str) -> List[str]:
        rows = self.db.query(UserRole.user_id).filter(
            UserRole.role_id == role_id
        ).order_by(UserRole.user_id).all()
        return [row.user_id for row in rows]

    async def has_role(self, user_id: str, role_id: str) -> bool:
        return self._exists(user_id, role_id)
