"""
SQLAlchemy implementation of PermissionRepository.
"""

from typing import List

from sqlalchemy.exc import IntegrityError

from authz.core.errors import DomainError, ErrorKind
from authz.domain.permission import Permission
from authz.domain.repositories import PermissionRepository
from authz.models.permission import PermissionModel
from authz.repositories.base import SQLAlchemyRepository


def permission_to_aggregate(model: PermissionModel) -> Permission:
    return Permission(
        id=model.id,
        name=model.name,
        resource=model.resource,
        action=model.action,
        description=model.description or "",
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyPermissionRepository(SQLAlchemyRepository, PermissionRepository):

    async def save(self, permission: Permission) -> None:
        try:
            with self._transaction() as db:
                model = db.get(PermissionModel, permission.id)
                if model is None:
                    model = PermissionModel(id=permission.id)
                    db.add(model)
                model.name = permission.name
                model.resource = str(permission.resource)
                model.action = str(permission.action)
                model.description = permission.description
                model.copy_timestamps(permission)
        except IntegrityError as e:
            raise DomainError(
                ErrorKind.INVALID_PERMISSION,
                f"permission {permission.permission_string} already exists",
            ).with_details("permission_id", permission.id) from e

    async def find_by_id(self, permission_id: str) -> Permission:
        model = self.db.get(PermissionModel, permission_id)
        if model is None:
            raise DomainError(ErrorKind.PERMISSION_NOT_FOUND).with_details("permission_id", permission_id)
        return permission_to_aggregate(model)

    async def find_by_resource_and_action(self, resource: str, action: str) -> Permission:
        model = self.db.query(PermissionModel).filter(
            PermissionModel.resource == str(resource),
            PermissionModel.action == str(action)
        ).first()
        if model is None:
            raise DomainError(ErrorKind.PERMISSION_NOT_FOUND).with_details(
                "permission", f"{resource}:{action}"
            )
        return permission_to_aggregate(model)

    async def find_all(self) -> List[Permission]:
        models = self.db.query(PermissionModel).order_by(
            PermissionModel.resource, PermissionModel.action
        ).all()
        return [permission_to_aggregate(m) for m in models]

    async def delete(self, permission_id: str) -> None:
        with self._transaction() as db:
            deleted = db.query(PermissionModel).filter(PermissionModel.id == permission_id).delete()
            if deleted == 0:
                raise DomainError(ErrorKind.PERMISSION_NOT_FOUND).with_details("permission_id", permission_id)
