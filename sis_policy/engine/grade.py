"""
Grade access decisions.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..policies.table import Capability as C
from ..policies.table import Policy, ResourceType, Role
from ..repositories.base import Grade, StateGate
from .base import BasePolicyEngine, all_of, decision_boundary, resolved
from .types import Actor, Decision

NOT_TEACHERS_STUDENT = "Student not assigned to this teacher"
NO_ASSIGNMENT_ACCESS = "No access to assignment"


class GradePolicyEngine(BasePolicyEngine):
    """Decides access to grades, grade reports and grade exports."""

    resource_type = ResourceType.GRADE

    async def _load(self, grade_id: str) -> Grade | None:
        return await self.lookup.get_resource(ResourceType.GRADE, grade_id)

    async def _view(
        self,
        policy: Policy,
        actor: Actor,
        grade_id: str | None = None,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return self.full_access(policy, "view")

        if not grade_id and not student_id:
            return Decision.deny("Grade ID or Student ID is required")

        grade = None
        if grade_id:
            grade = await self._load(grade_id)
            if grade is None:
                return Decision.deny("Grade not found")

        target_student = student_id or (grade.student_id if grade else None)
        if not target_student:
            return Decision.deny("Cannot determine student for grade access")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            has_student_access, has_assignment_access = await self.gather(
                self.lookup.can_teacher_view_student(actor.user_id, target_student),
                self.lookup.can_teacher_access_assignment(actor.user_id, grade.assignment_id)
                if grade and grade.assignment_id
                else resolved(True),
            )
            return all_of(
                [
                    (has_student_access, NOT_TEACHERS_STUDENT),
                    (has_assignment_access, NO_ASSIGNMENT_ACCESS),
                ],
                "Teacher can view student grades",
            )

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if target_student == actor.user_id:
                return Decision.allow("Student viewing own grades")
            return Decision.deny("Cannot view other student grades")

        if actor.role is Role.PARENT and policy.allows(C.VIEW_CHILD):
            if await self.lookup.is_student_parent_child(actor.user_id, target_student):
                return Decision.allow("Parent viewing child grades")
            return Decision.deny("Not authorized to view this student grades")

        return Decision.deny("Grade view access denied")

    @decision_boundary("Error processing view grade access")
    async def can_view(
        self,
        policy: Policy,
        actor: Actor,
        *,
        grade_id: str | None = None,
        student_id: str | None = None,
    ) -> Decision:
        return await self._view(policy, actor, grade_id, student_id)

    @decision_boundary("Error processing edit grade access")
    async def can_edit(
        self,
        policy: Policy,
        actor: Actor,
        *,
        grade_id: str | None = None,
        student_id: str | None = None,
        assignment_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.EDIT_ALL):
            return self.full_access(policy, "edit")

        grade = await self._load(grade_id) if grade_id else None
        target_student = student_id or (grade.student_id if grade else None)
        target_assignment = assignment_id or (grade.assignment_id if grade else None)

        if not target_student or not target_assignment:
            return Decision.deny("Student ID and Assignment ID are required for grade editing")

        if actor.role is Role.TEACHER and policy.allows(C.EDIT_STUDENTS):
            has_student_access, has_assignment_access, is_editable = await self.gather(
                self.lookup.can_teacher_view_student(actor.user_id, target_student),
                self.lookup.can_teacher_access_assignment(actor.user_id, target_assignment),
                # A grade that does not exist yet cannot be edited
                self.lookup.check_state_gate(StateGate.GRADE_EDITABLE, grade_id)
                if grade
                else resolved(False),
            )
            return all_of(
                [
                    (has_student_access, NOT_TEACHERS_STUDENT),
                    (has_assignment_access, NO_ASSIGNMENT_ACCESS),
                    (is_editable, "Grade is locked or finalized"),
                ],
                "Teacher can edit student grade",
            )

        return Decision.deny("Grade edit access denied")

    @decision_boundary("Error processing create grade access")
    async def can_create(
        self,
        policy: Policy,
        actor: Actor,
        *,
        student_id: str | None = None,
        assignment_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.CREATE_ALL):
            return Decision.allow("Admin can create grades")

        if not student_id or not assignment_id:
            return Decision.deny("Student ID and Assignment ID are required for grade creation")

        if actor.role is Role.TEACHER and policy.allows(C.CREATE_OWN):
            has_student_access, has_assignment_access, is_creatable = await self.gather(
                self.lookup.can_teacher_view_student(actor.user_id, student_id),
                self.lookup.can_teacher_access_assignment(actor.user_id, assignment_id),
                self.lookup.check_state_gate(
                    StateGate.GRADE_CREATABLE,
                    student_id=student_id,
                    assignment_id=assignment_id,
                ),
            )
            return all_of(
                [
                    (has_student_access, NOT_TEACHERS_STUDENT),
                    (has_assignment_access, NO_ASSIGNMENT_ACCESS),
                    (is_creatable, "Grade already exists or assignment not ready"),
                ],
                "Teacher can create grade",
            )

        return Decision.deny("Grade creation access denied")

    @decision_boundary("Error processing delete grade access")
    async def can_delete(
        self, policy: Policy, actor: Actor, *, grade_id: str | None = None
    ) -> Decision:
        if policy.allows(C.DELETE_ALL):
            return Decision.allow("Admin has delete access")

        if not grade_id:
            return Decision.deny("Grade ID is required")

        grade = await self._load(grade_id)
        if grade is None:
            return Decision.deny("Grade not found")

        if actor.role is Role.TEACHER and policy.allows(C.DELETE_OWN):
            has_student_access, has_assignment_access, is_deletable = await self.gather(
                self.lookup.can_teacher_view_student(actor.user_id, grade.student_id),
                self.lookup.can_teacher_access_assignment(actor.user_id, grade.assignment_id),
                self.lookup.check_state_gate(StateGate.GRADE_DELETABLE, grade_id),
            )
            return all_of(
                [
                    (has_student_access, NOT_TEACHERS_STUDENT),
                    (has_assignment_access, NO_ASSIGNMENT_ACCESS),
                    (is_deletable, "Grade cannot be deleted (finalized/reported)"),
                ],
                "Teacher can delete grade",
            )

        return Decision.deny("Grade delete access denied")

    @decision_boundary("Error filtering grades by access")
    async def filter(
        self, policy: Policy, actor: Actor, *, grade_ids: Sequence[str] = ()
    ) -> Decision:
        grade_ids = list(grade_ids or [])
        if policy.allows(C.VIEW_ALL):
            return Decision.filtered(grade_ids, "Admin can view all grades")

        async def visible(grade_id: str) -> bool:
            return bool((await self._view(policy, actor, grade_id)).allowed)

        accessible = await self.filter_ids(grade_ids, visible)
        return Decision.filtered(accessible, f"Filtered to {len(accessible)} accessible grades")

    @decision_boundary("Error processing student grades access")
    async def student_grades(
        self,
        policy: Policy,
        actor: Actor,
        *,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin can view all student grades")

        if not student_id:
            return Decision.deny("Student ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                return Decision.allow("Teacher can view student grades")
            return Decision.deny(NOT_TEACHERS_STUDENT)

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if student_id == actor.user_id:
                return Decision.allow("Student viewing own grades")
            return Decision.deny("Cannot view other student grades")

        if actor.role is Role.PARENT and policy.allows(C.VIEW_CHILD):
            if await self.lookup.is_student_parent_child(actor.user_id, student_id):
                return Decision.allow("Parent viewing child grades")
            return Decision.deny("Not authorized to view this student grades")

        return Decision.deny("Student grades access denied")

    @decision_boundary("Error processing class grades access")
    async def class_grades(
        self,
        policy: Policy,
        actor: Actor,
        *,
        class_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin can view all class grades")

        if not class_id:
            return Decision.deny("Class ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_REPORTS):
            if await self.lookup.can_teacher_access_class(actor.user_id, class_id):
                return Decision.allow("Teacher can view class grades")
            return Decision.deny("No access to this class")

        return Decision.deny("Class grades access denied")

    @decision_boundary("Error processing export grades access")
    async def can_export(
        self,
        policy: Policy,
        actor: Actor,
        *,
        class_id: str | None = None,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.EXPORT_ALL):
            return Decision.allow("Admin can export all grades")

        if actor.role is Role.TEACHER and policy.allows(C.EXPORT):
            if class_id:
                if await self.lookup.can_teacher_access_class(actor.user_id, class_id):
                    return Decision.allow("Teacher can export class grades")
                return Decision.deny("No access to this class")
            if student_id:
                if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                    return Decision.allow("Teacher can export student grades")
                return Decision.deny(NOT_TEACHERS_STUDENT)
            return Decision.deny("Class ID or Student ID is required for export")

        return Decision.deny("Grade export access denied")
