"""
Inbound policy request models.

Each resource endpoint accepts one JSON object carrying the action, the
requesting user and the resource identifiers the action needs. Field names
on the wire are camelCase; the models expose snake_case attributes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..policies.table import ResourceType


class AssignmentAction(str, Enum):
    CAN_VIEW = "canViewAssignment"
    CAN_EDIT = "canEditAssignment"
    CAN_GRADE = "canGradeAssignment"
    CAN_CREATE = "canCreateAssignment"
    CAN_DELETE = "canDeleteAssignment"
    FILTER = "filterAssignments"
    BY_STUDENT = "getAssignmentsByStudent"


class AttendanceAction(str, Enum):
    CAN_VIEW = "canViewAttendance"
    CAN_MARK = "canMarkAttendance"
    CAN_EDIT = "canEditAttendance"
    CAN_DELETE = "canDeleteAttendance"
    FILTER = "filterAttendance"
    STUDENT_ATTENDANCE = "getStudentAttendance"
    CLASS_ATTENDANCE = "getClassAttendance"
    CAN_BULK_MARK = "canBulkMarkAttendance"
    CAN_EXPORT = "canExportAttendance"


class GradeAction(str, Enum):
    CAN_VIEW = "canViewGrade"
    CAN_EDIT = "canEditGrade"
    CAN_CREATE = "canCreateGrade"
    CAN_DELETE = "canDeleteGrade"
    FILTER = "filterGrades"
    STUDENT_GRADES = "getStudentGrades"
    CLASS_GRADES = "getClassGrades"
    CAN_EXPORT = "canExportGrades"


class StudentAction(str, Enum):
    CAN_VIEW = "canView"
    CAN_EDIT = "canEdit"
    CAN_DELETE = "canDelete"
    CAN_CREATE = "canCreate"
    FILTER = "filterStudents"


class PolicyRequest(BaseModel):
    """
    Fields shared by every resource endpoint.

    ``date_range``, ``grading_period`` and ``academic_period`` are accepted
    as secondary context and recorded in the log context only.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    user_id: str = Field(alias="userId")
    user_role: str = Field(alias="userRole")
    class_id: str | None = Field(default=None, alias="classId")
    student_id: str | None = Field(default=None, alias="studentId")
    date_range: Any = Field(default=None, alias="dateRange")
    grading_period: Any = Field(default=None, alias="gradingPeriod")
    academic_period: Any = Field(default=None, alias="academicPeriod")

    def secondary_context(self) -> dict[str, Any]:
        return {
            "date_range": self.date_range,
            "grading_period": self.grading_period,
            "academic_period": self.academic_period,
        }


class AssignmentRequest(PolicyRequest):
    assignment_id: str | None = Field(default=None, alias="assignmentId")
    assignment_ids: list[str] | None = Field(default=None, alias="assignmentIds")


class AttendanceRequest(PolicyRequest):
    attendance_id: str | None = Field(default=None, alias="attendanceId")
    attendance_ids: list[str] | None = Field(default=None, alias="attendanceIds")


class GradeRequest(PolicyRequest):
    grade_id: str | None = Field(default=None, alias="gradeId")
    grade_ids: list[str] | None = Field(default=None, alias="gradeIds")
    assignment_id: str | None = Field(default=None, alias="assignmentId")


class StudentRequest(PolicyRequest):
    student_ids: list[str] | None = Field(default=None, alias="studentIds")


REQUEST_MODELS: dict[ResourceType, type[PolicyRequest]] = {
    ResourceType.ASSIGNMENT: AssignmentRequest,
    ResourceType.ATTENDANCE: AttendanceRequest,
    ResourceType.GRADE: GradeRequest,
    ResourceType.STUDENT: StudentRequest,
}

ACTIONS: dict[ResourceType, type[Enum]] = {
    ResourceType.ASSIGNMENT: AssignmentAction,
    ResourceType.ATTENDANCE: AttendanceAction,
    ResourceType.GRADE: GradeAction,
    ResourceType.STUDENT: StudentAction,
}
