"""
Assignment access decisions.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..policies.table import Capability as C
from ..policies.table import Policy, ResourceType, Role
from ..repositories.base import Assignment, StateGate
from .base import BasePolicyEngine, all_of, decision_boundary, resolved
from .types import Actor, Decision


class AssignmentPolicyEngine(BasePolicyEngine):
    """Decides view, edit, grade, create and delete access to assignments."""

    resource_type = ResourceType.ASSIGNMENT

    async def _load(self, assignment_id: str) -> Assignment | None:
        return await self.lookup.get_resource(ResourceType.ASSIGNMENT, assignment_id)

    async def _view(self, policy: Policy, actor: Actor, assignment_id: str | None) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return self.full_access(policy, "view")

        if not assignment_id:
            return Decision.deny("Assignment ID is required")

        assignment = await self._load(assignment_id)
        if assignment is None:
            return Decision.deny("Assignment not found")

        # Teachers see assignments they created and assignments of their students
        if actor.role is Role.TEACHER and policy.allows(C.VIEW_OWN):
            is_owner, has_student_access = await self.gather(
                self.lookup.is_created_by_teacher(
                    ResourceType.ASSIGNMENT, assignment_id, actor.user_id
                ),
                self.lookup.can_teacher_view_student(actor.user_id, assignment.student_id)
                if policy.allows(C.VIEW_STUDENTS)
                else resolved(False),
            )
            if is_owner:
                return Decision.allow("Teacher viewing own assignment")
            if has_student_access:
                return Decision.allow("Teacher viewing student assignment")
            return Decision.deny("No access to this assignment")

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if assignment.student_id == actor.user_id:
                return Decision.allow("Student viewing own assignment")
            return Decision.deny("Assignment not assigned to this student")

        return Decision.deny("Access denied by policy")

    @decision_boundary("Error processing view assignment access")
    async def can_view(
        self, policy: Policy, actor: Actor, *, assignment_id: str | None = None
    ) -> Decision:
        return await self._view(policy, actor, assignment_id)

    @decision_boundary("Error processing edit assignment access")
    async def can_edit(
        self, policy: Policy, actor: Actor, *, assignment_id: str | None = None
    ) -> Decision:
        if policy.allows(C.EDIT_ALL):
            return self.full_access(policy, "edit")

        if not assignment_id:
            return Decision.deny("Assignment ID is required")

        if await self._load(assignment_id) is None:
            return Decision.deny("Assignment not found")

        if actor.role is Role.TEACHER and policy.allows(C.EDIT_OWN):
            is_owner, is_editable = await self.gather(
                self.lookup.is_created_by_teacher(
                    ResourceType.ASSIGNMENT, assignment_id, actor.user_id
                ),
                self.lookup.check_state_gate(StateGate.ASSIGNMENT_EDITABLE, assignment_id),
            )
            return all_of(
                [
                    (is_owner, "Not teacher's assignment"),
                    (is_editable, "Assignment cannot be edited (submitted/graded)"),
                ],
                "Teacher can edit own assignment",
            )

        # Students submit assignments but never edit them
        return Decision.deny("Edit access denied")

    @decision_boundary("Error processing grade assignment access")
    async def can_grade(
        self,
        policy: Policy,
        actor: Actor,
        *,
        assignment_id: str | None = None,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.GRADE_ALL):
            return self.full_access(policy, "grading")

        if not assignment_id:
            return Decision.deny("Assignment ID is required for grading")

        if await self._load(assignment_id) is None:
            return Decision.deny("Assignment not found")

        if actor.role is Role.TEACHER and policy.allows(C.GRADE_OWN):
            is_owner, has_student_access, is_submitted = await self.gather(
                self.lookup.is_created_by_teacher(
                    ResourceType.ASSIGNMENT, assignment_id, actor.user_id
                ),
                self.lookup.can_teacher_view_student(actor.user_id, student_id)
                if student_id
                else resolved(True),
                self.lookup.check_state_gate(StateGate.ASSIGNMENT_SUBMITTED, assignment_id),
            )
            return all_of(
                [
                    (is_owner, "Not teacher's assignment"),
                    (has_student_access, "No access to this student"),
                    (is_submitted, "Assignment not yet submitted"),
                ],
                "Teacher can grade assignment",
            )

        return Decision.deny("Grading access denied")

    @decision_boundary("Error processing create assignment access")
    async def can_create(self, policy: Policy, actor: Actor) -> Decision:
        if policy.allows(C.CREATE_ALL):
            return Decision.allow(f"{policy.role.value.capitalize()} can create assignments")

        return Decision.deny("Create assignment access denied")

    @decision_boundary("Error processing delete assignment access")
    async def can_delete(
        self, policy: Policy, actor: Actor, *, assignment_id: str | None = None
    ) -> Decision:
        if policy.allows(C.DELETE_ALL):
            return self.full_access(policy, "delete")

        if not assignment_id:
            return Decision.deny("Assignment ID is required")

        if await self._load(assignment_id) is None:
            return Decision.deny("Assignment not found")

        if actor.role is Role.TEACHER and policy.allows(C.DELETE_OWN):
            is_owner, is_deletable = await self.gather(
                self.lookup.is_created_by_teacher(
                    ResourceType.ASSIGNMENT, assignment_id, actor.user_id
                ),
                self.lookup.check_state_gate(StateGate.ASSIGNMENT_DELETABLE, assignment_id),
            )
            return all_of(
                [
                    (is_owner, "Not teacher's assignment"),
                    (is_deletable, "Assignment cannot be deleted (has submissions/grades)"),
                ],
                "Teacher can delete own assignment",
            )

        return Decision.deny("Delete access denied")

    @decision_boundary("Error filtering assignments by access")
    async def filter(
        self, policy: Policy, actor: Actor, *, assignment_ids: Sequence[str] = ()
    ) -> Decision:
        assignment_ids = list(assignment_ids or [])
        if policy.allows(C.VIEW_ALL):
            return Decision.filtered(assignment_ids, "Admin can view all assignments")

        async def visible(assignment_id: str) -> bool:
            return bool((await self._view(policy, actor, assignment_id)).allowed)

        accessible = await self.filter_ids(assignment_ids, visible)
        return Decision.filtered(
            accessible, f"Filtered to {len(accessible)} accessible assignments"
        )

    @decision_boundary("Error processing student assignments access")
    async def by_student(
        self, policy: Policy, actor: Actor, *, student_id: str | None = None
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin can view all student assignments")

        if not student_id:
            return Decision.deny("Student ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                return Decision.allow("Teacher can view student assignments")
            return Decision.deny("Student not assigned to this teacher")

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if student_id == actor.user_id:
                return Decision.allow("Student viewing own assignments")
            return Decision.deny("Cannot view other student assignments")

        return Decision.deny("Access denied")
