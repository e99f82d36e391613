"""
Value objects shared by the permission aggregates and the evaluation engine.

ResourceType and ActionType are open enumerations: any well-formed name is
accepted, the known names are exposed as class constants, and the engine
compares them as plain strings.
"""

import re
from enum import Enum

from authz.core.errors import DomainError, ErrorKind

_NAME_PATTERN = re.compile(r"^(\*|[a-z][a-z0-9_\-]*)$")

PermissionID = str
RoleID = str
PolicyID = str


class _OpenName(str):
    """String-backed name validated once at construction."""

    _error_kind = ErrorKind.INVALID_PERMISSION
    _label = "name"

    def __new__(cls, value):
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not _NAME_PATTERN.match(value):
            raise DomainError(
                cls._error_kind,
                f"invalid {cls._label}: {value!r}"
            ).with_details(cls._label, value)
        return super().__new__(cls, value)

    def __repr__(self):
        return f"{type(self).__name__}({str.__repr__(self)})"


class ResourceType(_OpenName):
    """Kind of resource a permission or policy applies to."""

    _label = "resource"

    PROJECT = "project"
    TASK = "task"
    USER = "user"
    FILE = "file"
    ROLE = "role"


class ActionType(_OpenName):
    """Operation performed on a resource."""

    _label = "action"

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    APPROVE = "approve"
    EXECUTE = "execute"


class PolicyEffect(str, Enum):
    """Outcome asserted by a matched policy."""

    ALLOW = "allow"
    DENY = "deny"

    @classmethod
    def parse(cls, value) -> "PolicyEffect":
        """Parse an effect, raising INVALID_POLICY for unknown values."""
        try:
            return cls(value)
        except ValueError:
            raise DomainError(
                ErrorKind.INVALID_POLICY, f"invalid policy effect: {value!r}"
            ).with_details("effect", value)


class SystemRole:
    """Names of the predefined system roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    PROJECT_OWNER = "project_owner"
    PROJECT_MANAGER = "project_manager"
    TEAM_LEADER = "team_leader"
    EMPLOYEE = "employee"

    ALL = (SUPER_ADMIN, ADMIN, PROJECT_OWNER, PROJECT_MANAGER, TEAM_LEADER, EMPLOYEE)
