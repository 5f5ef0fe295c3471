"""
Policy Table

Static, role-indexed capability sets for each academic resource type.

The table is built once at import time and exposed read-only. Capability
names are a small normalized vocabulary shared by all resource types; the
per-resource sets below keep the exact semantics each resource needs.

This module is part of SIS_POLICY.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Role(str, Enum):
    """Roles an actor may claim on a request."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role | None":
        """Return the matching role, or None for unrecognized values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class ResourceType(str, Enum):
    """Academic resource types guarded by a policy endpoint."""

    ASSIGNMENT = "assignment"
    ATTENDANCE = "attendance"
    GRADE = "grade"
    STUDENT = "student"


class Capability(str, Enum):
    """Normalized capability vocabulary."""

    VIEW_ALL = "view_all"
    EDIT_ALL = "edit_all"
    DELETE_ALL = "delete_all"
    CREATE_ALL = "create_all"
    VIEW_OWN = "view_own"
    EDIT_OWN = "edit_own"
    DELETE_OWN = "delete_own"
    CREATE_OWN = "create_own"
    EXPORT = "export"
    BULK = "bulk"
    # Unconditional variants of EXPORT and BULK, admin only
    EXPORT_ALL = "export_all"
    BULK_ALL = "bulk_all"
    GRADE_ALL = "grade_all"
    GRADE_OWN = "grade_own"
    SUBMIT_OWN = "submit_own"
    VIEW_STUDENTS = "view_students"
    EDIT_STUDENTS = "edit_students"
    MARK = "mark"
    VIEW_REPORTS = "view_reports"
    VIEW_HISTORY = "view_history"
    VIEW_CHILD = "view_child"
    VIEW_CHILD_HISTORY = "view_child_history"
    VIEW_CHILD_REPORTS = "view_child_reports"


@dataclass(frozen=True)
class Policy:
    """
    Capability set for one (resource type, role) pair.

    Attributes:
        resource_type: Resource type the policy applies to
        role: Role the policy was defined for
        capabilities: Granted capabilities
    """

    resource_type: ResourceType
    role: Role
    capabilities: frozenset[Capability]

    def allows(self, capability: Capability) -> bool:
        """Check whether the policy grants a capability."""
        return capability in self.capabilities


C = Capability

_ADMIN_BASE = {C.VIEW_ALL, C.EDIT_ALL, C.DELETE_ALL, C.CREATE_ALL}

_CAPABILITIES: dict[ResourceType, dict[Role, set[Capability]]] = {
    ResourceType.ASSIGNMENT: {
        Role.ADMIN: _ADMIN_BASE | {C.GRADE_ALL},
        Role.TEACHER: {
            C.CREATE_ALL,
            C.VIEW_OWN,
            C.EDIT_OWN,
            C.DELETE_OWN,
            C.GRADE_OWN,
            C.VIEW_STUDENTS,
        },
        Role.STUDENT: {C.VIEW_OWN, C.SUBMIT_OWN},
    },
    ResourceType.ATTENDANCE: {
        Role.ADMIN: _ADMIN_BASE | {C.VIEW_REPORTS, C.EXPORT_ALL, C.BULK_ALL},
        Role.TEACHER: {
            C.VIEW_OWN,
            C.EDIT_OWN,
            C.DELETE_OWN,
            C.CREATE_OWN,
            C.VIEW_STUDENTS,
            C.EDIT_STUDENTS,
            C.MARK,
            C.VIEW_REPORTS,
            C.EXPORT,
            C.BULK,
        },
        Role.STUDENT: {C.VIEW_OWN, C.VIEW_HISTORY, C.VIEW_REPORTS},
        Role.PARENT: {C.VIEW_CHILD, C.VIEW_CHILD_HISTORY, C.VIEW_CHILD_REPORTS},
    },
    ResourceType.GRADE: {
        Role.ADMIN: _ADMIN_BASE | {C.VIEW_REPORTS, C.EXPORT_ALL},
        Role.TEACHER: {
            C.VIEW_OWN,
            C.EDIT_OWN,
            C.DELETE_OWN,
            C.CREATE_OWN,
            C.VIEW_STUDENTS,
            C.EDIT_STUDENTS,
            C.VIEW_REPORTS,
            C.EXPORT,
        },
        Role.STUDENT: {C.VIEW_OWN, C.VIEW_REPORTS},
        Role.PARENT: {C.VIEW_CHILD, C.VIEW_CHILD_REPORTS},
    },
    ResourceType.STUDENT: {
        Role.ADMIN: set(_ADMIN_BASE),
        Role.TEACHER: {C.CREATE_ALL, C.VIEW_STUDENTS, C.EDIT_STUDENTS},
        Role.STUDENT: {C.VIEW_OWN},
    },
}


def _build_table() -> Mapping[tuple[ResourceType, Role], Policy]:
    table = {}
    for resource_type, by_role in _CAPABILITIES.items():
        for role, capabilities in by_role.items():
            table[(resource_type, role)] = Policy(
                resource_type=resource_type,
                role=role,
                capabilities=frozenset(capabilities),
            )
    return MappingProxyType(table)


POLICY_TABLE: Mapping[tuple[ResourceType, Role], Policy] = _build_table()


def resolve_policy(resource_type: ResourceType | str, role: Role | str | None) -> Policy:
    """
    Resolve the policy for a resource type and role.

    Unrecognized roles, and roles with no entry for the resource type, get
    the student policy.

    Args:
        resource_type: Resource type (enum member or its value)
        role: Requesting role (enum member, raw string or None)

    Returns:
        The matching Policy
    """
    resource_type = ResourceType(resource_type)
    parsed = Role.parse(role)
    if parsed is not None:
        policy = POLICY_TABLE.get((resource_type, parsed))
        if policy is not None:
            return policy
    return POLICY_TABLE[(resource_type, Role.STUDENT)]


def policy_matrix(resource_type: ResourceType | str) -> dict[str, list[str]]:
    """
    Describe the capabilities of every role defined for a resource type.

    Returns:
        Mapping of role value to sorted capability values
    """
    resource_type = ResourceType(resource_type)
    return {
        role.value: sorted(c.value for c in policy.capabilities)
        for (rtype, role), policy in POLICY_TABLE.items()
        if rtype is resource_type
    }
