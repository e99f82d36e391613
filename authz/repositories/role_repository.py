"""
SQLAlchemy implementation of RoleRepository.

Saving a role persists its descriptive fields and synchronises the
role_permissions rows with the aggregate's permission ids.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authz.core.errors import DomainError, ErrorKind
from authz.domain.permission import Permission
from authz.domain.repositories import RoleRepository
from authz.domain.role import Role
from authz.models.permission import PermissionModel
from authz.models.role import RoleModel
from authz.models.role_permission import RolePermission
from authz.models.user_role import UserRole
from authz.repositories.base import SQLAlchemyRepository
from authz.repositories.permission_repository import permission_to_aggregate

logger = logging.getLogger(__name__)


def role_permission_ids(db: Session, role_id: str) -> List[str]:
    """Permission ids granted to a role, in grant order."""
    rows = db.query(RolePermission.permission_id).filter(
        RolePermission.role_id == role_id
    ).order_by(RolePermission.id).all()
    return [row.permission_id for row in rows]


def role_to_aggregate(db: Session, model: RoleModel) -> Role:
    return Role(
        id=model.id,
        name=model.name,
        display_name=model.display_name or "",
        description=model.description or "",
        is_system=model.is_system,
        permissions=role_permission_ids(db, model.id),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyRoleRepository(SQLAlchemyRepository, RoleRepository):

    def _to_aggregate(self, model: RoleModel) -> Role:
        return role_to_aggregate(self.db, model)

    @staticmethod
    def _check_permissions_exist(db: Session, permission_ids: List[str]) -> None:
        if not permission_ids:
            return
        known = {
            row.id for row in db.query(PermissionModel.id).filter(
                PermissionModel.id.in_(permission_ids)
            ).all()
        }
        missing = [pid for pid in permission_ids if pid not in known]
        if missing:
            raise DomainError(
                ErrorKind.PERMISSION_NOT_FOUND, f"unknown permissions: {', '.join(missing)}"
            ).with_details("permission_ids", missing)

    async def save(self, role: Role) -> None:
        try:
            with self._transaction() as db:
                wanted = role.permissions
                self._check_permissions_exist(db, wanted)

                model = db.get(RoleModel, role.id)
                if model is None:
                    model = RoleModel(id=role.id)
                    db.add(model)
                model.name = role.name
                model.display_name = role.display_name
                model.description = role.description
                model.is_system = role.is_system
                model.copy_timestamps(role)
                db.flush()

                current = set(role_permission_ids(db, role.id))
                for permission_id in wanted:
                    if permission_id not in current:
                        db.add(RolePermission(role_id=role.id, permission_id=permission_id))
                stale = current - set(wanted)
                if stale:
                    db.query(RolePermission).filter(
                        RolePermission.role_id == role.id,
                        RolePermission.permission_id.in_(stale)
                    ).delete(synchronize_session=False)
        except IntegrityError as e:
            raise DomainError(
                ErrorKind.INVALID_ROLE, f"role {role.name} conflicts with an existing role"
            ).with_details("role_id", role.id) from e

    async def find_by_id(self, role_id: str) -> Role:
        model = self.db.get(RoleModel, role_id)
        if model is None:
            raise DomainError(ErrorKind.ROLE_NOT_FOUND).with_details("role_id", role_id)
        return self._to_aggregate(model)

    async def find_by_name(self, name: str) -> Role:
        model = self.db.query(RoleModel).filter(RoleModel.name == name).first()
        if model is None:
            raise DomainError(ErrorKind.ROLE_NOT_FOUND).with_details("role_name", name)
        return self._to_aggregate(model)

    async def find_all(self) -> List[Role]:
        models = self.db.query(RoleModel).order_by(RoleModel.name).all()
        return [self._to_aggregate(m) for m in models]

    async def delete(self, role_id: str) -> None:
        with self._transaction() as db:
            db.query(RolePermission).filter(RolePermission.role_id == role_id).delete()
            db.query(UserRole).filter(UserRole.role_id == role_id).delete()
            deleted = db.query(RoleModel).filter(RoleModel.id == role_id).delete()
            if deleted == 0:
                raise DomainError(ErrorKind.ROLE_NOT_FOUND).with_details("role_id", role_id)

    async def add_permission_to_role(self, role_id: str, permission_id: str) -> None:
        with self._transaction() as db:
            if db.get(RoleModel, role_id) is None:
                raise DomainError(ErrorKind.ROLE_NOT_FOUND).with_details("role_id", role_id)
            if db.get(PermissionModel, permission_id) is None:
                raise DomainError(ErrorKind.PERMISSION_NOT_FOUND).with_details("permission_id", permission_id)

            exists = db.query(RolePermission).filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id
            ).first()
            if exists:
                logger.debug(f"Permission {permission_id} already granted to role {role_id}")
                return
            db.add(RolePermission(role_id=role_id, permission_id=permission_id))

    async def remove_permission_from_role(self, role_id: str, permission_id: str) -> None:
        with self._transaction() as db:
            db.query(RolePermission).filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id
            ).delete()

    async def find_permissions_by_role(self, role_id: str) -> List[Permission]:
        # Single JOIN query, grant order
        models = self.db.query(PermissionModel).join(
            RolePermission, PermissionModel.id == RolePermission.permission_id
        ).filter(
            RolePermission.role_id == role_id
        ).order_by(RolePermission.id).all()
        return [permission_to_aggregate(m) for m in models]
