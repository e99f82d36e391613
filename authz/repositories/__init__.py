"""
SQLAlchemy-backed repository implementations.
"""

from sqlalchemy.orm import Session

from authz.repositories.permission_repository import SQLAlchemyPermissionRepository
from authz.repositories.policy_repository import SQLAlchemyPolicyRepository
from authz.repositories.role_repository import SQLAlchemyRoleRepository
from authz.repositories.user_role_repository import SQLAlchemyUserRoleRepository

__all__ = [
    "SQLAlchemyPermissionRepository",
    "SQLAlchemyPolicyRepository",
    "SQLAlchemyRoleRepository",
    "SQLAlchemyUserRoleRepository",
    "build_permission_service",
]


def build_permission_service(db: Session):
    """Wire a PermissionDomainService over SQLAlchemy repositories sharing one session."""
    from authz.domain.service import PermissionDomainService

    return PermissionDomainService(
        permission_repo=SQLAlchemyPermissionRepository(db),
        role_repo=SQLAlchemyRoleRepository(db),
        policy_repo=SQLAlchemyPolicyRepository(db),
        user_role_repo=SQLAlchemyUserRoleRepository(db),
    )
