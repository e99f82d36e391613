#!/usr/bin/env python3
"""
Database seeder script to create the default permission data.

This script creates:
- The six system roles (super_admin, admin, project_owner, project_manager,
  team_leader, employee)
- The default permission set for projects, tasks, users, roles and files
- The role grants for each system role
- Sample ABAC policies that use ${resource.*} variable references

Running it twice is safe: existing rows are left alone.

Usage:
    python scripts/seed_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.orm import Session

from authz.core.database import SessionLocal, init_db
from authz.core.errors import DomainError, ErrorKind
from authz.core.logging_config import configure_logging
from authz.domain.permission import Permission
from authz.domain.policy import Policy
from authz.domain.role import Role
from authz.domain.valueobjects import SystemRole
from authz.repositories import (
    SQLAlchemyPermissionRepository,
    SQLAlchemyPolicyRepository,
    SQLAlchemyRoleRepository,
)

PERMISSIONS = {
    "user": ["create", "read", "update", "delete"],
    "role": ["create", "read", "update", "delete", "assign"],
    "project": ["create", "read", "update", "delete"],
    "task": ["create", "read", "update", "delete", "assign", "approve", "execute"],
    "file": ["create", "read", "delete"],
}

ROLES = [
    {"name": SystemRole.SUPER_ADMIN, "display_name": "Super Administrator",
     "description": "Full access to every resource", "grants": "*"},
    {"name": SystemRole.ADMIN, "display_name": "Administrator",
     "description": "Manages users and roles",
     "grants": ["user:*", "role:*", "project:read", "task:read"]},
    {"name": SystemRole.PROJECT_OWNER, "display_name": "Project Owner",
     "description": "Creates and manages projects",
     "grants": ["user:read", "project:*", "task:*", "file:*"]},
    {"name": SystemRole.PROJECT_MANAGER, "display_name": "Project Manager",
     "description": "Runs day-to-day project work",
     "grants": ["user:read", "project:read", "project:update", "task:create", "task:read",
                "task:update", "task:assign", "task:approve", "file:create", "file:read"]},
    {"name": SystemRole.TEAM_LEADER, "display_name": "Team Leader",
     "description": "Manages team members and tasks",
     "grants": ["user:read", "project:read", "task:create", "task:read", "task:update",
                "task:assign", "task:approve", "file:create", "file:read"]},
    {"name": SystemRole.EMPLOYEE, "display_name": "Employee",
     "description": "Takes part in projects and tasks",
     "grants": ["user:read", "project:read", "task:read", "task:execute", "file:create", "file:read"]},
]

POLICIES = [
    {"id": "policy-user-self-read", "name": "user-self-read",
     "description": "Users can read their own profile",
     "resource": "user", "action": "read", "effect": "allow",
     "conditions": {"user_id": "${resource.id}"}, "priority": 100},
    {"id": "policy-task-responsible-update", "name": "task-responsible-update",
     "description": "The responsible user can update their task",
     "resource": "task", "action": "update", "effect": "allow",
     "conditions": {"user_id": "${resource.responsible_id}"}, "priority": 80},
    {"id": "policy-project-owner-delete", "name": "project-owner-delete",
     "description": "Only the owner can delete a project",
     "resource": "project", "action": "delete", "effect": "allow",
     "conditions": {"user_id": "${resource.owner_id}"}, "priority": 70},
    {"id": "policy-archived-task-update", "name": "archived-task-readonly",
     "description": "Archived tasks cannot be modified",
     "resource": "task", "action": "update", "effect": "deny",
     "conditions": {"status": "archived"}, "priority": 200},
]


def _expand(grants):
    """Expand 'resource:*' and '*' shorthands into permission ids."""
    if grants == "*":
        return [f"perm-{r}-{a}" for r, actions in PERMISSIONS.items() for a in actions]
    ids = []
    for grant in grants:
        resource, action = grant.split(":")
        actions = PERMISSIONS[resource] if action == "*" else [action]
        ids.extend(f"perm-{resource}-{a}" for a in actions)
    return ids


async def create_permissions(db: Session):
    """Create the default permissions if they don't exist."""
    repo = SQLAlchemyPermissionRepository(db)
    for resource, actions in PERMISSIONS.items():
        for action in actions:
            permission_id = f"perm-{resource}-{action}"
            try:
                await repo.find_by_id(permission_id)
                print(f"⚠️  Permission '{resource}:{action}' already exists, skipping")
            except DomainError as e:
                if e.kind is not ErrorKind.PERMISSION_NOT_FOUND:
                    raise
                await repo.save(Permission(permission_id, f"{resource}:{action}", resource, action))
                print(f"✅ Created permission '{resource}:{action}'")


async def create_roles(db: Session):
    """Create the system roles with their grants if they don't exist."""
    repo = SQLAlchemyRoleRepository(db)
    for role_data in ROLES:
        role_id = f"role-{role_data['name'].replace('_', '-')}"
        try:
            await repo.find_by_id(role_id)
            print(f"⚠️  Role '{role_data['name']}' already exists, skipping")
            continue
        except DomainError as e:
            if e.kind is not ErrorKind.ROLE_NOT_FOUND:
                raise

        role = Role(
            id=role_id,
            name=role_data["name"],
            display_name=role_data["display_name"],
            description=role_data["description"],
            is_system=True,
        )
        for permission_id in _expand(role_data["grants"]):
            role.add_permission(permission_id)
        await repo.save(role)
        print(f"✅ Created role '{role.name}' with {len(role.permissions)} permissions")


async def create_policies(db: Session):
    """Create the sample ABAC policies if they don't exist."""
    repo = SQLAlchemyPolicyRepository(db)
    for policy_data in POLICIES:
        try:
            await repo.find_by_id(policy_data["id"])
            print(f"⚠️  Policy '{policy_data['name']}' already exists, skipping")
        except DomainError as e:
            if e.kind is not ErrorKind.POLICY_NOT_FOUND:
                raise
            await repo.save(Policy(**policy_data))
            print(f"✅ Created policy '{policy_data['name']}'")


async def seed(db: Session):
    await create_permissions(db)
    await create_roles(db)
    await create_policies(db)


def main():
    """Main seeding function."""
    configure_logging()
    print("🌱 Seeding permission data...")
    init_db()
    db = SessionLocal()
    try:
        asyncio.run(seed(db))
        print("\n🎉 Seeding completed successfully!")
    except Exception as e:
        print(f"❌ Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
