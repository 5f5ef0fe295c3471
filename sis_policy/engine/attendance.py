"""
Attendance access decisions.

Caller-supplied student and class IDs take precedence over the values
stored on the attendance record.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..policies.table import Capability as C
from ..policies.table import Policy, ResourceType, Role
from ..repositories.base import AttendanceRecord, StateGate
from .base import BasePolicyEngine, all_of, decision_boundary, resolved
from .types import Actor, Decision


class AttendancePolicyEngine(BasePolicyEngine):
    """Decides access to attendance records, marking, reports and exports."""

    resource_type = ResourceType.ATTENDANCE

    async def _load(self, attendance_id: str) -> AttendanceRecord | None:
        return await self.lookup.get_resource(ResourceType.ATTENDANCE, attendance_id)

    async def _view(
        self,
        policy: Policy,
        actor: Actor,
        attendance_id: str | None = None,
        student_id: str | None = None,
        class_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return self.full_access(policy, "view")

        record = None
        if attendance_id:
            record = await self._load(attendance_id)
            if record is None:
                return Decision.deny("Attendance record not found")

        target_student = student_id or (record.student_id if record else None)
        target_class = class_id or (record.class_id if record else None)

        if not target_student and not target_class:
            return Decision.deny("Attendance ID, Student ID or Class ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            has_class_access, has_student_access = await self.gather(
                self.lookup.can_teacher_access_class(actor.user_id, target_class)
                if target_class
                else resolved(False),
                self.lookup.can_teacher_view_student(actor.user_id, target_student)
                if target_student
                else resolved(False),
            )
            if has_class_access:
                return Decision.allow("Teacher can view class attendance")
            if has_student_access:
                return Decision.allow("Teacher can view student attendance")
            return Decision.deny("No access to attendance records")

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_OWN):
            if target_student == actor.user_id:
                return Decision.allow("Student viewing own attendance")
            return Decision.deny("Cannot view other student attendance")

        if actor.role is Role.PARENT and policy.allows(C.VIEW_CHILD):
            if not target_student:
                return Decision.deny("Student ID required for parent access")
            if await self.lookup.is_student_parent_child(actor.user_id, target_student):
                return Decision.allow("Parent viewing child attendance")
            return Decision.deny("Not authorized to view this student attendance")

        return Decision.deny("Attendance view access denied")

    @decision_boundary("Error processing view attendance access")
    async def can_view(
        self,
        policy: Policy,
        actor: Actor,
        *,
        attendance_id: str | None = None,
        student_id: str | None = None,
        class_id: str | None = None,
    ) -> Decision:
        return await self._view(policy, actor, attendance_id, student_id, class_id)

    @decision_boundary("Error processing mark attendance access")
    async def can_mark(
        self,
        policy: Policy,
        actor: Actor,
        *,
        student_id: str | None = None,
        class_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.CREATE_ALL):
            return Decision.allow("Admin can mark attendance for all")

        if not student_id or not class_id:
            return Decision.deny("Student ID and Class ID are required for marking attendance")

        if actor.role is Role.TEACHER and policy.allows(C.MARK):
            has_class_access, has_student_access, can_mark_today = await self.gather(
                self.lookup.can_teacher_access_class(actor.user_id, class_id),
                self.lookup.can_teacher_view_student(actor.user_id, student_id),
                self.lookup.check_state_gate(StateGate.ATTENDANCE_MARKABLE, class_id=class_id),
            )
            return all_of(
                [
                    (has_class_access, "No access to this class"),
                    (has_student_access, "Student not in teacher class"),
                    (can_mark_today, "Attendance already marked or outside marking window"),
                ],
                "Teacher can mark attendance",
            )

        return Decision.deny("Attendance marking access denied")

    @decision_boundary("Error processing edit attendance access")
    async def can_edit(
        self,
        policy: Policy,
        actor: Actor,
        *,
        attendance_id: str | None = None,
        student_id: str | None = None,
        class_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.EDIT_ALL):
            return self.full_access(policy, "edit")

        record = None
        if attendance_id:
            record = await self._load(attendance_id)
            if record is None:
                return Decision.deny("Attendance record not found")

        target_student = student_id or (record.student_id if record else None)
        target_class = class_id or (record.class_id if record else None)

        if not target_student or not target_class:
            return Decision.deny("Student ID and Class ID are required for editing attendance")

        if actor.role is Role.TEACHER and policy.allows(C.EDIT_STUDENTS):
            has_class_access, has_student_access, is_editable = await self.gather(
                self.lookup.can_teacher_access_class(actor.user_id, target_class),
                self.lookup.can_teacher_view_student(actor.user_id, target_student),
                # Without a stored record there is nothing locked yet
                self.lookup.check_state_gate(StateGate.ATTENDANCE_EDITABLE, attendance_id)
                if record
                else resolved(True),
            )
            return all_of(
                [
                    (has_class_access, "No access to this class"),
                    (has_student_access, "Student not in teacher class"),
                    (is_editable, "Attendance record is locked (too old or finalized)"),
                ],
                "Teacher can edit attendance",
            )

        return Decision.deny("Attendance edit access denied")

    @decision_boundary("Error processing delete attendance access")
    async def can_delete(
        self, policy: Policy, actor: Actor, *, attendance_id: str | None = None
    ) -> Decision:
        if policy.allows(C.DELETE_ALL):
            return self.full_access(policy, "delete")

        if not attendance_id:
            return Decision.deny("Attendance ID is required")

        record = await self._load(attendance_id)
        if record is None:
            return Decision.deny("Attendance record not found")

        if actor.role is Role.TEACHER and policy.allows(C.DELETE_OWN):
            has_class_access, has_student_access, is_deletable = await self.gather(
                self.lookup.can_teacher_access_class(actor.user_id, record.class_id),
                self.lookup.can_teacher_view_student(actor.user_id, record.student_id),
                self.lookup.check_state_gate(StateGate.ATTENDANCE_DELETABLE, attendance_id),
            )
            return all_of(
                [
                    (has_class_access, "No access to this class"),
                    (has_student_access, "Student not in teacher class"),
                    (is_deletable, "Attendance record cannot be deleted (finalized or too old)"),
                ],
                "Teacher can delete attendance",
            )

        return Decision.deny("Attendance delete access denied")

    @decision_boundary("Error filtering attendance by access")
    async def filter(
        self, policy: Policy, actor: Actor, *, attendance_ids: Sequence[str] = ()
    ) -> Decision:
        attendance_ids = list(attendance_ids or [])
        if policy.allows(C.VIEW_ALL):
            return Decision.filtered(attendance_ids, "Admin can view all attendance records")

        async def visible(attendance_id: str) -> bool:
            return bool((await self._view(policy, actor, attendance_id)).allowed)

        accessible = await self.filter_ids(attendance_ids, visible)
        return Decision.filtered(
            accessible, f"Filtered to {len(accessible)} accessible attendance records"
        )

    @decision_boundary("Error processing student attendance access")
    async def student_attendance(
        self,
        policy: Policy,
        actor: Actor,
        *,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin can view all student attendance")

        if not student_id:
            return Decision.deny("Student ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_STUDENTS):
            if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                return Decision.allow("Teacher can view student attendance")
            return Decision.deny("Student not in teacher classes")

        if actor.role is Role.STUDENT and policy.allows(C.VIEW_HISTORY):
            if student_id == actor.user_id:
                return Decision.allow("Student viewing own attendance history")
            return Decision.deny("Cannot view other student attendance")

        if actor.role is Role.PARENT and policy.allows(C.VIEW_CHILD_HISTORY):
            if await self.lookup.is_student_parent_child(actor.user_id, student_id):
                return Decision.allow("Parent viewing child attendance history")
            return Decision.deny("Not authorized to view this student attendance")

        return Decision.deny("Student attendance access denied")

    @decision_boundary("Error processing class attendance access")
    async def class_attendance(
        self,
        policy: Policy,
        actor: Actor,
        *,
        class_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.VIEW_ALL):
            return Decision.allow("Admin can view all class attendance")

        if not class_id:
            return Decision.deny("Class ID is required")

        if actor.role is Role.TEACHER and policy.allows(C.VIEW_REPORTS):
            if await self.lookup.can_teacher_access_class(actor.user_id, class_id):
                return Decision.allow("Teacher can view class attendance")
            return Decision.deny("No access to this class")

        return Decision.deny("Class attendance access denied")

    @decision_boundary("Error processing bulk mark attendance access")
    async def can_bulk_mark(
        self, policy: Policy, actor: Actor, *, class_id: str | None = None
    ) -> Decision:
        if policy.allows(C.BULK_ALL):
            return Decision.allow("Admin can bulk mark attendance")

        if not class_id:
            return Decision.deny("Class ID is required for bulk attendance marking")

        if actor.role is Role.TEACHER and policy.allows(C.BULK):
            has_class_access, can_bulk_mark = await self.gather(
                self.lookup.can_teacher_access_class(actor.user_id, class_id),
                self.lookup.check_state_gate(
                    StateGate.ATTENDANCE_BULK_MARKABLE, class_id=class_id
                ),
            )
            return all_of(
                [
                    (has_class_access, "No access to this class"),
                    (can_bulk_mark, "Bulk attendance already marked or outside marking window"),
                ],
                "Teacher can bulk mark attendance",
            )

        return Decision.deny("Bulk attendance marking access denied")

    @decision_boundary("Error processing export attendance access")
    async def can_export(
        self,
        policy: Policy,
        actor: Actor,
        *,
        class_id: str | None = None,
        student_id: str | None = None,
    ) -> Decision:
        if policy.allows(C.EXPORT_ALL):
            return Decision.allow("Admin can export all attendance")

        if actor.role is Role.TEACHER and policy.allows(C.EXPORT):
            if class_id:
                if await self.lookup.can_teacher_access_class(actor.user_id, class_id):
                    return Decision.allow("Teacher can export class attendance")
                return Decision.deny("No access to this class")
            if student_id:
                if await self.lookup.can_teacher_view_student(actor.user_id, student_id):
                    return Decision.allow("Teacher can export student attendance")
                return Decision.deny("Student not in teacher classes")
            return Decision.deny("Class ID or Student ID is required for export")

        return Decision.deny("Attendance export access denied")
