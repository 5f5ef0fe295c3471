"""
Access Decision Engine

One engine per resource type, plus a facade that holds all four over a
single relationship lookup.

Usage:
    from sis_policy.engine import AccessDecisionEngine, Actor
    from sis_policy.policies import ResourceType, resolve_policy

    engine = AccessDecisionEngine(lookup)
    actor = Actor.from_request("teacher1", "teacher")
    policy = resolve_policy(ResourceType.GRADE, actor.raw_role)
    decision = await engine.grades.can_view(policy, actor, grade_id="grade1")
"""

from __future__ import annotations

from ..config import PolicyConfig
from ..policies.table import ResourceType
from ..repositories.base import RelationshipLookup
from .assignment import AssignmentPolicyEngine
from .attendance import AttendancePolicyEngine
from .base import BasePolicyEngine, all_of, decision_boundary
from .grade import GradePolicyEngine
from .student import StudentPolicyEngine
from .types import Actor, Decision


class AccessDecisionEngine:
    """
    Facade over the per-resource engines.

    All engines share one lookup and one configuration.
    """

    def __init__(self, lookup: RelationshipLookup, config: PolicyConfig | None = None):
        self.lookup = lookup
        self.config = config or PolicyConfig()
        self.assignments = AssignmentPolicyEngine(lookup, self.config)
        self.attendance = AttendancePolicyEngine(lookup, self.config)
        self.grades = GradePolicyEngine(lookup, self.config)
        self.students = StudentPolicyEngine(lookup, self.config)

    def for_resource(self, resource_type: ResourceType | str) -> BasePolicyEngine:
        """Return the engine that decides access to ``resource_type``."""
        return {
            ResourceType.ASSIGNMENT: self.assignments,
            ResourceType.ATTENDANCE: self.attendance,
            ResourceType.GRADE: self.grades,
            ResourceType.STUDENT: self.students,
        }[ResourceType(resource_type)]


__all__ = [
    "AccessDecisionEngine",
    "AssignmentPolicyEngine",
    "AttendancePolicyEngine",
    "GradePolicyEngine",
    "StudentPolicyEngine",
    "BasePolicyEngine",
    "Actor",
    "Decision",
    "all_of",
    "decision_boundary",
]
