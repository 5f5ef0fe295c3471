"""
Unit tests for attendance access decisions.

The fixed clock reads 2024-01-15 09:30, the day the sample records were
taken and inside the default 07:00-18:00 marking window.
"""

from datetime import datetime

import pytest

from sis_policy.engine import AccessDecisionEngine
from sis_policy.policies import ResourceType
from sis_policy.repositories import InMemoryLookup

ATTENDANCE = ResourceType.ATTENDANCE


def engine_at(dataset, when: datetime) -> AccessDecisionEngine:
    return AccessDecisionEngine(InMemoryLookup(dataset, clock=lambda: when))


@pytest.mark.unit
class TestMarkAttendance:
    """Test canMarkAttendance."""

    @pytest.mark.asyncio
    async def test_teacher_marks_own_student(self, engine, as_user):
        decision = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student1", class_id="class1"
        )
        assert decision.to_dict() == {
            "success": True,
            "allowed": True,
            "reason": "Teacher can mark attendance",
        }

    @pytest.mark.asyncio
    async def test_student_not_in_teacher_class(self, engine, as_user):
        decision = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student3", class_id="class1"
        )
        assert decision.allowed is False
        assert decision.reason == "Student not in teacher class"

    @pytest.mark.asyncio
    async def test_class_checked_first(self, engine, as_user):
        decision = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student3", class_id="class3"
        )
        assert decision.reason == "No access to this class"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hour", [6, 18, 21])
    async def test_outside_marking_window(self, dataset, as_user, hour):
        engine = engine_at(dataset, datetime(2024, 1, 15, hour, 0))
        decision = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student1", class_id="class1"
        )
        assert decision.allowed is False
        assert decision.reason == "Attendance already marked or outside marking window"

    @pytest.mark.asyncio
    async def test_ids_required(self, engine, as_user):
        decision = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student1"
        )
        assert decision.reason == "Student ID and Class ID are required for marking attendance"

    @pytest.mark.asyncio
    async def test_admin_and_student(self, engine, as_user):
        admin = await engine.attendance.can_mark(*as_user(ATTENDANCE, "admin1", "admin"))
        student = await engine.attendance.can_mark(
            *as_user(ATTENDANCE, "student1", "student"), student_id="student1", class_id="class1"
        )
        assert admin.reason == "Admin can mark attendance for all"
        assert student.allowed is False
        assert student.reason == "Attendance marking access denied"


@pytest.mark.unit
class TestViewAttendance:
    """Test canViewAttendance."""

    @pytest.mark.asyncio
    async def test_teacher_views_class_record(self, engine, as_user):
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att1"
        )
        assert decision.allowed is True
        assert decision.reason == "Teacher can view class attendance"

    @pytest.mark.asyncio
    async def test_teacher_views_student_outside_own_class(self, engine, dataset, as_user):
        dataset.attendance["att4"] = {
            "student_id": "student2",
            "class_id": "class4",
            "date": "2024-01-15",
        }
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att4"
        )
        assert decision.reason == "Teacher can view student attendance"

    @pytest.mark.asyncio
    async def test_teacher_without_access(self, engine, as_user):
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att3"
        )
        assert decision.allowed is False
        assert decision.reason == "No access to attendance records"

    @pytest.mark.asyncio
    async def test_caller_ids_take_precedence(self, engine, as_user):
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att3", class_id="class1"
        )
        assert decision.allowed is True

    @pytest.mark.asyncio
    async def test_student_views_own_record(self, engine, as_user):
        student = as_user(ATTENDANCE, "student1", "student")
        own = await engine.attendance.can_view(*student, attendance_id="att1")
        other = await engine.attendance.can_view(*student, attendance_id="att2")
        assert own.allowed is True
        assert other.reason == "Cannot view other student attendance"

    @pytest.mark.asyncio
    async def test_parent_views_child_record(self, engine, as_user):
        child = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "parent1", "parent"), attendance_id="att2"
        )
        not_child = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "parent2", "parent"), attendance_id="att1"
        )
        assert child.reason == "Parent viewing child attendance"
        assert not_child.allowed is False
        assert not_child.reason == "Not authorized to view this student attendance"

    @pytest.mark.asyncio
    async def test_parent_needs_student(self, engine, as_user):
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "parent1", "parent"), class_id="class1"
        )
        assert decision.reason == "Student ID required for parent access"

    @pytest.mark.asyncio
    async def test_missing_record(self, engine, as_user):
        decision = await engine.attendance.can_view(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att99"
        )
        assert decision.reason == "Attendance record not found"

    @pytest.mark.asyncio
    async def test_no_target(self, engine, as_user):
        decision = await engine.attendance.can_view(*as_user(ATTENDANCE, "teacher1", "teacher"))
        assert decision.reason == "Attendance ID, Student ID or Class ID is required"

    @pytest.mark.asyncio
    async def test_relationship_change_is_seen_immediately(self, engine, dataset, as_user):
        parent = as_user(ATTENDANCE, "parent1", "parent")
        assert (await engine.attendance.can_view(*parent, student_id="student2")).allowed

        dataset.parent_children["parent1"].discard("student2")

        assert not (await engine.attendance.can_view(*parent, student_id="student2")).allowed


@pytest.mark.unit
class TestEditAndDeleteAttendance:
    """Test canEditAttendance and canDeleteAttendance."""

    @pytest.mark.asyncio
    async def test_teacher_edits_recent_record(self, engine, as_user):
        decision = await engine.attendance.can_edit(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att1"
        )
        assert decision.allowed is True
        assert decision.reason == "Teacher can edit attendance"

    @pytest.mark.asyncio
    async def test_old_record_is_locked(self, dataset, as_user):
        engine = engine_at(dataset, datetime(2024, 1, 17, 9, 0))
        decision = await engine.attendance.can_edit(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att1"
        )
        assert decision.allowed is False
        assert decision.reason == "Attendance record is locked (too old or finalized)"

    @pytest.mark.asyncio
    async def test_edit_without_stored_record(self, engine, as_user):
        decision = await engine.attendance.can_edit(
            *as_user(ATTENDANCE, "teacher1", "teacher"), student_id="student2", class_id="class2"
        )
        assert decision.allowed is True

    @pytest.mark.asyncio
    async def test_edit_other_teachers_class(self, engine, as_user):
        decision = await engine.attendance.can_edit(
            *as_user(ATTENDANCE, "teacher2", "teacher"), attendance_id="att1"
        )
        assert decision.reason == "No access to this class"

    @pytest.mark.asyncio
    async def test_teacher_deletes_recent_record(self, engine, as_user):
        decision = await engine.attendance.can_delete(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att1"
        )
        assert decision.reason == "Teacher can delete attendance"

    @pytest.mark.asyncio
    async def test_finalized_record_not_deletable(self, engine, dataset, as_user):
        dataset.attendance["att1"]["status"] = "finalized"
        decision = await engine.attendance.can_delete(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att1"
        )
        assert decision.allowed is False
        assert decision.reason == "Attendance record cannot be deleted (finalized or too old)"

    @pytest.mark.asyncio
    async def test_delete_after_window(self, dataset, as_user):
        engine = engine_at(dataset, datetime(2024, 1, 23, 9, 0))
        decision = await engine.attendance.can_delete(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att2"
        )
        assert decision.allowed is False

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, engine, as_user):
        decision = await engine.attendance.can_delete(
            *as_user(ATTENDANCE, "teacher1", "teacher"), attendance_id="att99"
        )
        assert decision.reason == "Attendance record not found"


@pytest.mark.unit
class TestAttendanceLists:
    """Test filtering and list-by-relation actions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user_id, role, expected",
        [
            ("teacher1", "teacher", ["att1", "att2"]),
            ("teacher2", "teacher", ["att3"]),
            ("student2", "student", ["att2"]),
            ("parent1", "parent", ["att1", "att2"]),
            ("parent2", "parent", ["att3"]),
        ],
    )
    async def test_filter(self, engine, as_user, user_id, role, expected):
        decision = await engine.attendance.filter(
            *as_user(ATTENDANCE, user_id, role), attendance_ids=["att1", "att2", "att3", "att9"]
        )
        assert decision.filtered_ids == expected
        assert decision.reason == f"Filtered to {len(expected)} accessible attendance records"

    @pytest.mark.asyncio
    async def test_student_history(self, engine, as_user):
        parent = as_user(ATTENDANCE, "parent1", "parent")
        child = await engine.attendance.student_attendance(*parent, student_id="student2")
        other = await engine.attendance.student_attendance(*parent, student_id="student3")
        assert child.reason == "Parent viewing child attendance history"
        assert other.allowed is False

    @pytest.mark.asyncio
    async def test_student_own_history(self, engine, as_user):
        decision = await engine.attendance.student_attendance(
            *as_user(ATTENDANCE, "student1", "student"),
            student_id="student1",
        )
        assert decision.reason == "Student viewing own attendance history"

    @pytest.mark.asyncio
    async def test_class_attendance(self, engine, as_user):
        teacher = as_user(ATTENDANCE, "teacher1", "teacher")
        assert (await engine.attendance.class_attendance(*teacher, class_id="class2")).allowed
        denied = await engine.attendance.class_attendance(*teacher, class_id="class3")
        assert denied.reason == "No access to this class"

    @pytest.mark.asyncio
    async def test_students_cannot_view_class_attendance(self, engine, as_user):
        decision = await engine.attendance.class_attendance(
            *as_user(ATTENDANCE, "student1", "student"), class_id="class1"
        )
        assert decision.reason == "Class attendance access denied"


@pytest.mark.unit
class TestBulkMarkAndExport:
    """Test canBulkMarkAttendance and canExportAttendance."""

    @pytest.mark.asyncio
    async def test_bulk_mark_once_per_day(self, engine, dataset, as_user):
        teacher = as_user(ATTENDANCE, "teacher1", "teacher")
        first = await engine.attendance.can_bulk_mark(*teacher, class_id="class1")
        assert first.reason == "Teacher can bulk mark attendance"

        dataset.bulk_marks["class1"] = {"2024-01-15"}

        second = await engine.attendance.can_bulk_mark(*teacher, class_id="class1")
        assert second.allowed is False
        assert second.reason == "Bulk attendance already marked or outside marking window"

    @pytest.mark.asyncio
    async def test_bulk_mark_other_class(self, engine, as_user):
        decision = await engine.attendance.can_bulk_mark(
            *as_user(ATTENDANCE, "teacher1", "teacher"), class_id="class3"
        )
        assert decision.reason == "No access to this class"

    @pytest.mark.asyncio
    async def test_admin_bulk_mark(self, engine, as_user):
        decision = await engine.attendance.can_bulk_mark(*as_user(ATTENDANCE, "admin1", "admin"))
        assert decision.reason == "Admin can bulk mark attendance"

    @pytest.mark.asyncio
    async def test_export(self, engine, as_user):
        teacher = as_user(ATTENDANCE, "teacher1", "teacher")
        by_class = await engine.attendance.can_export(*teacher, class_id="class1")
        by_student = await engine.attendance.can_export(*teacher, student_id="student3")
        neither = await engine.attendance.can_export(*teacher)
        assert by_class.reason == "Teacher can export class attendance"
        assert by_student.reason == "Student not in teacher classes"
        assert neither.reason == "Class ID or Student ID is required for export"

    @pytest.mark.asyncio
    async def test_export_roles(self, engine, as_user):
        admin = await engine.attendance.can_export(*as_user(ATTENDANCE, "admin1", "admin"))
        student = await engine.attendance.can_export(
            *as_user(ATTENDANCE, "student1", "student"), student_id="student1"
        )
        assert admin.allowed is True
        assert student.reason == "Attendance export access denied"
