"""
Unit tests for the permission domain service (mocked repositories).

Tests for:
- Role assignment and revocation rules
- Permission aggregation across roles
- Context building for access checks
"""

import pytest

from authz.core.errors import DomainError, ErrorKind
from authz.domain.permission import Permission
from authz.domain.role import Role


@pytest.fixture
def custom_role():
    return Role("role-reviewer", "reviewer", "Reviewer")


@pytest.fixture
def system_role():
    return Role("role-admin", "admin", "Administrator", is_system=True)


# ==================== ASSIGNMENT TESTS ====================

@pytest.mark.unit
class TestAssignRole:
    """Test assign_role_to_user."""

    async def test_assign_role(self, mock_service, mock_repos, custom_role):
        """Test assigning an existing, unassigned, non-system role."""
        mock_repos["role_repo"].find_by_id.return_value = custom_role

        await mock_service.assign_role_to_user("u1", "role-reviewer")

        mock_repos["user_role_repo"].assign_role.assert_awaited_once_with("u1", "role-reviewer")

    async def test_assign_unknown_role(self, mock_service, mock_repos):
        """Test assigning a role that does not exist."""
        mock_repos["role_repo"].find_by_id.side_effect = DomainError(ErrorKind.ROLE_NOT_FOUND)

        with pytest.raises(DomainError) as exc_info:
            await mock_service.assign_role_to_user("u1", "role-missing")

        assert exc_info.value.kind is ErrorKind.ROLE_NOT_FOUND
        mock_repos["user_role_repo"].assign_role.assert_not_called()

    async def test_assign_unknown_role_when_repo_returns_none(self, mock_service, mock_repos):
        """Test a None lookup result is reported as ROLE_NOT_FOUND too."""
        mock_repos["role_repo"].find_by_id.return_value = None

        with pytest.raises(DomainError) as exc_info:
            await mock_service.assign_role_to_user("u1", "role-missing")

        assert exc_info.value.kind is ErrorKind.ROLE_NOT_FOUND
        assert exc_info.value.details["role_id"] == "role-missing"

    async def test_assign_role_twice(self, mock_service, mock_repos, custom_role):
        """Test assigning a role the user already holds."""
        mock_repos["role_repo"].find_by_id.return_value = custom_role
        mock_repos["user_role_repo"].has_role.return_value = True

        with pytest.raises(DomainError) as exc_info:
            await mock_service.assign_role_to_user("u1", "role-reviewer")

        assert exc_info.value.kind is ErrorKind.ROLE_ALREADY_ASSIGNED
        mock_repos["user_role_repo"].assign_role.assert_not_called()

    async def test_assign_system_role(self, mock_service, mock_repos, system_role):
        """Test system roles cannot be assigned through the service."""
        mock_repos["role_repo"].find_by_id.return_value = system_role

        with pytest.raises(DomainError) as exc_info:
            await mock_service.assign_role_to_user("u1", "role-admin")

        assert exc_info.value.kind is ErrorKind.SYSTEM_ROLE_IMMUTABLE
        mock_repos["user_role_repo"].assign_role.assert_not_called()

    async def test_already_assigned_checked_before_system(self, mock_service, mock_repos, system_role):
        """Test the duplicate check runs before the system role check."""
        mock_repos["role_repo"].find_by_id.return_value = system_role
        mock_repos["user_role_repo"].has_role.return_value = True

        with pytest.raises(DomainError) as exc_info:
            await mock_service.assign_role_to_user("u1", "role-admin")

        assert exc_info.value.kind is ErrorKind.ROLE_ALREADY_ASSIGNED

    async def test_repository_error_propagates(self, mock_service, mock_repos, custom_role):
        """Test store failures are not converted into domain errors."""
        mock_repos["role_repo"].find_by_id.return_value = custom_role
        mock_repos["user_role_repo"].assign_role.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await mock_service.assign_role_to_user("u1", "role-reviewer")


# ==================== REVOCATION TESTS ====================

@pytest.mark.unit
class TestRevokeRole:
    """Test revoke_role_from_user."""

    async def test_revoke_role(self, mock_service, mock_repos, custom_role):
        """Test revoking a held non-system role."""
        mock_repos["role_repo"].find_by_id.return_value = custom_role
        mock_repos["user_role_repo"].has_role.return_value = True

        await mock_service.revoke_role_from_user("u1", "role-reviewer")

        mock_repos["user_role_repo"].revoke_role.assert_awaited_once_with("u1", "role-reviewer")

    async def test_revoke_unknown_role(self, mock_service, mock_repos):
        """Test revoking a role that does not exist."""
        mock_repos["role_repo"].find_by_id.side_effect = DomainError(ErrorKind.ROLE_NOT_FOUND)

        with pytest.raises(DomainError) as exc_info:
            await mock_service.revoke_role_from_user("u1", "role-missing")

        assert exc_info.value.kind is ErrorKind.ROLE_NOT_FOUND

    async def test_revoke_unassigned_role(self, mock_service, mock_repos, custom_role):
        """Test revoking a role the user does not hold."""
        mock_repos["role_repo"].find_by_id.return_value = custom_role

        with pytest.raises(DomainError) as exc_info:
            await mock_service.revoke_role_from_user("u1", "role-reviewer")

        assert exc_info.value.kind is ErrorKind.ROLE_NOT_ASSIGNED
        mock_repos["user_role_repo"].revoke_role.assert_not_called()

    async def test_revoke_system_role(self, mock_service, mock_repos, system_role):
        """Test system roles cannot be revoked through the service."""
        mock_repos["role_repo"].find_by_id.return_value = system_role
        mock_repos["user_role_repo"].has_role.return_value = True

        with pytest.raises(DomainError) as exc_info:
            await mock_service.revoke_role_from_user("u1", "role-admin")

        assert exc_info.value.kind is ErrorKind.SYSTEM_ROLE_IMMUTABLE
        mock_repos["user_role_repo"].revoke_role.assert_not_called()


# ==================== QUERY TESTS ====================

@pytest.mark.unit
class TestUserQueries:
    """Test permission and role queries."""

    async def test_permissions_deduplicated_across_roles(self, mock_service, mock_repos,
                                                         task_update_permission, task_read_permission):
        """Test a permission reachable via two roles appears once, in first-seen order."""
        delete = Permission("perm-task-delete", "task:delete", "task", "delete")
        mock_repos["user_role_repo"].find_roles_by_user.return_value = [
            Role("role-a", "a"), Role("role-b", "b"),
        ]
        grants = {
            "role-a": [task_read_permission, task_update_permission],
            "role-b": [task_update_permission, delete],
        }

        async def find_permissions_by_role(role_id):
            return grants[role_id]

        mock_repos["role_repo"].find_permissions_by_role.side_effect = find_permissions_by_role

        permissions = await mock_service.get_user_permissions("u1")

        assert [p.id for p in permissions] == ["perm-task-read", "perm-task-update", "perm-task-delete"]

    async def test_permissions_empty_without_roles(self, mock_service):
        """Test a user without roles has no permissions."""
        assert await mock_service.get_user_permissions("u1") == []

    async def test_get_user_roles(self, mock_service, mock_repos, custom_role):
        """Test roles are returned as stored."""
        mock_repos["user_role_repo"].find_roles_by_user.return_value = [custom_role]

        assert await mock_service.get_user_roles("u1") == [custom_role]

    @pytest.mark.parametrize("name,expected", [("reviewer", True), ("admin", False)])
    async def test_has_role_named(self, mock_service, mock_repos, custom_role, name, expected):
        """Test role lookup by name."""
        mock_repos["user_role_repo"].find_roles_by_user.return_value = [custom_role]

        assert await mock_service.has_role_named("u1", name) is expected


# ==================== ACCESS CHECK TESTS ====================

@pytest.mark.unit
class TestAccessChecks:
    """Test can_user_perform_action and context building."""

    async def test_build_context_resolves_roles(self, mock_service, mock_repos, custom_role):
        """Test the context carries the user's role ids and copies of the attributes."""
        mock_repos["user_role_repo"].find_roles_by_user.return_value = [custom_role]
        resource_ctx = {"owner_id": "u1"}

        ctx = await mock_service.build_context("u1", "task", "update", resource_ctx, {"client_ip": "10.0.0.1"})

        assert ctx.user_roles == ["role-reviewer"]
        assert ctx.resource_ctx == resource_ctx
        assert ctx.resource_ctx is not resource_ctx
        assert ctx.environment == {"client_ip": "10.0.0.1"}

    async def test_role_grant_allows(self, mock_service, mock_repos, custom_role, task_update_permission):
        """Test a role grant is enough without policies."""
        mock_repos["user_role_repo"].find_roles_by_user.return_value = [custom_role]
        mock_repos["role_repo"].find_permissions_by_role.return_value = [task_update_permission]

        assert await mock_service.can_user_perform_action("u1", "task", "update") is True

    async def test_no_roles_no_policies_denies(self, mock_service):
        """Test the default answer is deny."""
        assert await mock_service.can_user_perform_action("u1", "task", "update") is False

    async def test_policy_grants_without_role(self, mock_service, mock_repos, make_policy):
        """Test an owner policy allows a user with no roles."""
        mock_repos["policy_repo"].find_by_resource_and_action.return_value = [
            make_policy("owner-edit", conditions={"user_id": "${resource.owner_id}"}),
        ]

        assert await mock_service.can_user_perform_action("u1", "task", "update", {"owner_id": "u1"}) is True
        assert await mock_service.can_user_perform_action("u2", "task", "update", {"owner_id": "u1"}) is False

    async def test_evaluate_returns_reason(self, mock_service):
        """Test the full result is available to callers that need the reason."""
        result = await mock_service.evaluate("u1", "task", "update")

        assert result.allowed is False
        assert result.reason == "no matching role permissions"
