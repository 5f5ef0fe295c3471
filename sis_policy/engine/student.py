"""
Student record access decisions.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..policies.table import Capability as C
from ..policies.table import Policy, ResourceType, Role
from .base import BasePolicyEngine, decision_boundary
from .types import Actor, Decision


class StudentPolicyEngine(BasePolicyEngine):
    """Decides access to student records."""

    resource_type = ResourceType.STUDENT

    async def _view(self, policy: Policy, actor: Actor, student_id: str | None) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin has full access")

        # Without an explicit target a student is asking about their own record
        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if student_id and student_id != actor.user_id:
                return Decision.deny("Students can only view their own records")
            return Decision.allow("Student viewing own record")

        if not student_id:
            return Decision.deny("Student ID is required")

        if await self.lookup.get_resource(ResourceType.STUDENT, student_id) is None:
            return Decision.deny("Student not found")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                return Decision.allow("Teacher viewing assigned student")
            return Decision.deny("Student not assigned to this teacher")

        return Decision.deny("Access denied by policy")

    @decision_boundary("Error processing view access")
    async def can_view(
        self,
        policy: Policy,
        actor: Actor,
        *,
        student_id: str | None = None,
        student_ids: Sequence[str] | None = None,
    ) -> Decision:
        if (
            not student_id
            and student_ids
            and actor.role is Role.TEACHER
            and policy.allows(C.VIEW_STUDENTS)
            and not policy.allows(C.VIEW_ALL)
        ):
            assigned = set(await self.lookup.get_assigned_students(actor.user_id))
            allowed_ids = [sid for sid in student_ids if sid in assigned]
            return Decision.filtered(
                allowed_ids,
                f"Teacher can view {len(allowed_ids)} of {len(student_ids)} requested students",
                allowed=True,
            )

        return await self._view(policy, actor, student_id)

    @decision_boundary("Error processing edit access")
    async def can_edit(
        self, policy: Policy, actor: Actor, *, student_id: str | None = None
    ) -> Decision:
        if policy.allows(C.EDIT_ALL):
            return self.full_access(policy, "edit")

        if actor.role is Role.TEACHER and policy.allows(C.EDIT_STUDENTS):
            if not student_id:
                return Decision.deny("Student ID required for edit access check")
            if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                return Decision.allow("Teacher can edit assigned student")
            return Decision.deny("Cannot edit unassigned student")

        return Decision.deny("Edit access denied")

    @decision_boundary("Error processing delete access")
    async def can_delete(
        self, policy: Policy, actor: Actor, *, student_id: str | None = None
    ) -> Decision:
        if policy.allows(C.DELETE_ALL):
            return Decision.allow("Admin has delete access")

        return Decision.deny("Delete access restricted to administrators")

    @decision_boundary("Error processing create access")
    async def can_create(self, policy: Policy, actor: Actor) -> Decision:
        if policy.allows(C.CREATE_ALL):
            return Decision.allow(f"{policy.role.value.capitalize()} can create students")

        return Decision.deny("Create access denied")

    @decision_boundary("Error filtering students by access")
    async def filter(
        self, policy: Policy, actor: Actor, *, student_ids: Sequence[str] = ()
    ) -> Decision:
        student_ids = list(student_ids or [])
        if policy.allows(C.VIEW_ALL):
            return Decision.filtered(student_ids, "Admin can view all students")

        if actor.role is Role.STUDENT:
            reason = "Student can only view own record"
        elif actor.role is Role.TEACHER:
            reason = None
        else:
            return Decision.filtered([], "No access to requested students")

        async def visible(student_id: str) -> bool:
            return bool((await self._view(policy, actor, student_id)).allowed)

        accessible = await self.filter_ids(student_ids, visible)
        return Decision.filtered(
            accessible, reason or f"Filtered to {len(accessible)} assigned students"
        )
