"""
Policy table and resource lifecycle rules.
"""

from . import state_gates
from .table import (
    POLICY_TABLE,
    Capability,
    Policy,
    ResourceType,
    Role,
    policy_matrix,
    resolve_policy,
)

__all__ = [
    "POLICY_TABLE",
    "Capability",
    "Policy",
    "ResourceType",
    "Role",
    "policy_matrix",
    "resolve_policy",
    "state_gates",
]
