"""
SIS_POLICY - Student Information System Access Policies

Role-based access decisions for assignments, attendance, grades and
student records.
"""

# Configuration
from .config import PolicyConfig
# Request dispatching
from .dispatch import PolicyDispatcher, PolicyResponse
# Decision engine
from .engine import AccessDecisionEngine, Actor, Decision
# Policies
from .policies import Capability, Policy, ResourceType, Role, resolve_policy
# Relationship lookups
from .repositories import (
    InMemoryLookup,
    MongoRelationshipLookup,
    RelationshipLookup,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "PolicyConfig",
    # Engine
    "AccessDecisionEngine",
    "Actor",
    "Decision",
    # Dispatch
    "PolicyDispatcher",
    "PolicyResponse",
    # Policies
    "Capability",
    "Policy",
    "ResourceType",
    "Role",
    "resolve_policy",
    # Lookups
    "RelationshipLookup",
    "InMemoryLookup",
    "MongoRelationshipLookup",
]
