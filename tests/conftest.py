"""
Pytest configuration and fixtures for testing.

This module provides common fixtures for:
- Database session management (in-memory SQLite)
- SQLAlchemy repositories and the permission service
- Mocked repositories for failure-path unit tests
- Common roles, permissions and policies
"""

import pytest
from unittest.mock import AsyncMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import authz.models  # noqa: F401  registers tables on Base.metadata
from authz.core.database import Base
from authz.domain.evaluation import EvaluationContext
from authz.domain.permission import Permission
from authz.domain.policy import Policy
from authz.domain.role import Role
from authz.domain.service import PermissionDomainService
from authz.repositories import (
    SQLAlchemyPermissionRepository,
    SQLAlchemyPolicyRepository,
    SQLAlchemyRoleRepository,
    SQLAlchemyUserRoleRepository,
)


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="session")
def test_db_engine():
    """Create an in-memory SQLite engine shared by the test session."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_db_engine):
    """Create a fresh database session for each test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine,
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        # Clear all tables for next test
        Base.metadata.drop_all(bind=test_db_engine)
        Base.metadata.create_all(bind=test_db_engine)


# ==================== REPOSITORY FIXTURES ====================

@pytest.fixture
def permission_repo(db_session):
    return SQLAlchemyPermissionRepository(db_session)


@pytest.fixture
def role_repo(db_session):
    return SQLAlchemyRoleRepository(db_session)


@pytest.fixture
def policy_repo(db_session):
    return SQLAlchemyPolicyRepository(db_session)


@pytest.fixture
def user_role_repo(db_session):
    return SQLAlchemyUserRoleRepository(db_session)


@pytest.fixture
def permission_service(permission_repo, role_repo, policy_repo, user_role_repo):
    """Permission service over the SQLite repositories."""
    return PermissionDomainService(
        permission_repo=permission_repo,
        role_repo=role_repo,
        policy_repo=policy_repo,
        user_role_repo=user_role_repo,
    )


# ==================== MOCK REPOSITORY FIXTURES ====================

@pytest.fixture
def mock_repos():
    """AsyncMock repositories with empty defaults."""
    repos = {
        "permission_repo": AsyncMock(),
        "role_repo": AsyncMock(),
        "policy_repo": AsyncMock(),
        "user_role_repo": AsyncMock(),
    }
    repos["role_repo"].find_permissions_by_role.return_value = []
    repos["policy_repo"].find_by_resource_and_action.return_value = []
    repos["user_role_repo"].find_roles_by_user.return_value = []
    repos["user_role_repo"].has_role.return_value = False
    return repos


@pytest.fixture
def mock_service(mock_repos):
    return PermissionDomainService(**mock_repos)


# ==================== DOMAIN FIXTURES ====================

@pytest.fixture
def task_update_permission():
    return Permission("perm-task-update", "task:update", "task", "update", "Update tasks")


@pytest.fixture
def task_read_permission():
    return Permission("perm-task-read", "task:read", "task", "read", "Read tasks")


@pytest.fixture
def make_context():
    """Factory for evaluation contexts with task:update defaults."""
    def _make(user_id="u1", roles=None, resource="task", action="update",
              resource_ctx=None, environment=None):
        return EvaluationContext(
            user_id=user_id,
            user_roles=list(roles or []),
            resource=resource,
            action=action,
            resource_ctx=dict(resource_ctx or {}),
            environment=dict(environment or {}),
        )
    return _make


@pytest.fixture
def make_policy():
    """Factory for task:update policies."""
    def _make(id, effect="allow", priority=100, conditions=None, is_active=True,
              resource="task", action="update", name=None):
        return Policy(
            id=id,
            name=name or id,
            resource=resource,
            action=action,
            effect=effect,
            conditions=conditions if conditions is not None else {},
            priority=priority,
            is_active=is_active,
        )
    return _make


@pytest.fixture
async def manager_setup(permission_repo, role_repo, task_update_permission, task_read_permission):
    """Persist a non-system 'manager' role granting task:update and task:read."""
    await permission_repo.save(task_update_permission)
    await permission_repo.save(task_read_permission)
    role = Role("role-manager", "manager", "Manager", "Manages tasks")
    role.add_permission(task_update_permission.id)
    role.add_permission(task_read_permission.id)
    await role_repo.save(role)
    return role
